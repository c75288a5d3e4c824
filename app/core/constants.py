"""
Service-wide constants
"""

SERVICE_NAME = "elra-leave-backend"
SYSTEM_CREDIT = "ELRA - Enterprise Leave & Resource Administration"
