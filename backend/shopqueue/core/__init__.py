# Core package initialization
# Configuration, errors, logging and request-layer helpers
