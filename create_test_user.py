"""
Create test user on the remote service (API_BASE_URL)
"""
from app.auth import AuthService
from app.config import get_settings
from app.infrastructure.api_client import SubscriptionGateway

settings = get_settings()
gateway = SubscriptionGateway(settings.get_api_base_url(), timeout=settings.API_TIMEOUT_SECONDS)

try:
    user = AuthService(gateway).register("test@example.com", "password123", "Test User")
    if user is None:
        existing = gateway.find_user_by_email("test@example.com")
        print(f"User already exists: test@example.com (ID: {existing.id})")
    else:
        print("Created user:")
        print("  Email: test@example.com")
        print("  Password: password123")
finally:
    gateway.close()
