"""Services: orchestration between repositories and vendor gateways."""
