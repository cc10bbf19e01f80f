"""
Seed demo data for local development.
Creates an admin, a client, a few third parties and one evidence record.
Run: python -m scripts.seed_demo_data
"""
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from grc.core.config import get_settings
from grc.core.policy import Role
from grc.core.security import get_password_hash
from grc.db.models import Evidence, EvidenceCategory, ThirdParty, User
from grc.db.session import SessionLocal

DEMO_PASSWORD = "demo-password"

THIRD_PARTIES = [
    {"name": "Northwind Hosting", "email": "security@northwind.example.com",
     "company": "Northwind", "role": "Cloud provider", "industry": "Tech", "risk_score": 42},
    {"name": "Contoso Payroll", "email": "trust@contoso.example.com",
     "company": "Contoso", "role": "Payroll processor", "industry": "Finance", "risk_score": 67.5},
    {"name": "Fabrikam Logistics", "email": None,
     "company": "Fabrikam", "role": "Shipping", "industry": "Logistics", "risk_score": 15},
]


def get_or_create_user(db, email: str, role: Role, settings) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        print(f"User exists: {user.email} (ID: {user.id})")
        return user
    user = User(
        email=email,
        hashed_password=get_password_hash(DEMO_PASSWORD, settings),
        role=role.value,
    )
    db.add(user)
    db.flush()
    print(f"Created {role.value}: {user.email} (ID: {user.id})")
    return user


def seed_demo_data():
    """Create demo data. Safe to run repeatedly."""
    settings = get_settings()
    db = SessionLocal()

    try:
        admin = get_or_create_user(db, "admin@example.com", Role.ADMIN, settings)
        client = get_or_create_user(db, "client@example.com", Role.CLIENT, settings)

        for data in THIRD_PARTIES:
            if db.query(ThirdParty).filter(ThirdParty.name == data["name"]).first():
                print(f"Third party exists: {data['name']}")
                continue
            db.add(ThirdParty(created_by=admin.id, **data))
            print(f"Created third party: {data['name']}")

        if not db.query(Evidence).filter(Evidence.owner_id == client.id).first():
            os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
            filename = "0-demo-policy.txt"
            path = os.path.join(settings.UPLOAD_DIR, filename)
            content = b"Information security policy (demo)\n"
            with open(path, "wb") as f:
                f.write(content)
            db.add(Evidence(
                title="Demo security policy",
                category=EvidenceCategory.POLICY.value,
                filename=filename,
                storage_path=path,
                size=len(content),
                owner_id=client.id,
            ))
            print(f"Created evidence for {client.email}")

        db.commit()
        print(f"Demo data ready. Password for both users: {DEMO_PASSWORD}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo_data()
