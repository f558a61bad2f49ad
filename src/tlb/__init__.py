"""Client runtime for the TLB test load balancing service."""
