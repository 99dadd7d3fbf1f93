import os

# Settings must exist before clubero.database is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_clubero.db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
