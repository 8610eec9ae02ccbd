"""Business logic for tenant access, programs and mentoring."""
