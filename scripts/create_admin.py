import argparse
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.core.db import SessionLocal
from app.core.security import hash_password
from app.models import Business, Membership, User


def run(email: str, password: str, business_name: str, role: str):
    db = SessionLocal()
    try:
        business = db.query(Business).filter(Business.name == business_name).first()
        if not business:
            business = Business(name=business_name)
            db.add(business)
            db.flush()

        user = db.query(User).filter(User.email == email.lower().strip()).first()
        if not user:
            user = User(email=email.lower().strip(), full_name="Admin User", password_hash=hash_password(password))
            db.add(user)
            db.flush()

        membership = (
            db.query(Membership)
            .filter(Membership.user_id == user.id, Membership.business_id == business.id)
            .first()
        )
        if not membership:
            db.add(Membership(user_id=user.id, business_id=business.id, role=role))
        else:
            membership.role = role

        db.commit()
        print(f"{role.capitalize()} ready: {email} @ {business.name}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--business", default="My Business")
    parser.add_argument("--role", choices=["owner", "admin"], default="owner")
    args = parser.parse_args()
    run(args.email, args.password, args.business, args.role)
