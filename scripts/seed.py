import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from datetime import date, timedelta

from app.core.db import SessionLocal
from app.core.security import hash_password
from app.models import Business, Client, Employee, Expense, Job, JobEmployee, Membership, User


def run() -> None:
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == "owner@demo.local").first():
            print("Seed already applied")
            return

        business = Business(name="Sparkle Home Cleaning")
        db.add(business)
        db.flush()

        maria = Employee(business_id=business.id, name="Maria Lopez", role_title="Lead cleaner", rate_cents=2200, pay_type="hourly", color="#10B981")
        dev = Employee(business_id=business.id, name="Dev Patel", role_title="Cleaner", rate_cents=1800, pay_type="hourly", color="#F59E0B")
        db.add_all([maria, dev])
        db.flush()

        owner = User(email="owner@demo.local", full_name="Demo Owner", password_hash=hash_password("demo1234"))
        crew = User(email="maria@demo.local", full_name="Maria Lopez", password_hash=hash_password("demo1234"))
        db.add_all([owner, crew])
        db.flush()
        db.add_all(
            [
                Membership(business_id=business.id, user_id=owner.id, role="owner"),
                Membership(business_id=business.id, user_id=crew.id, role="employee", employee_id=maria.id),
            ]
        )

        hendersons = Client(
            business_id=business.id,
            name="The Hendersons",
            contact_name="Ann Henderson",
            phone="+15125550142",
            address="418 Oak Ridge Dr",
            frequency="weekly",
            payment_method="venmo",
            service_type="cleaning",
            service_rate_cents=14000,
            service_rate_type="flat",
        )
        bakery = Client(
            business_id=business.id,
            name="Corner Bakery",
            contact_name="Luis Ortega",
            phone="+15125550188",
            frequency="monthly",
            payment_method="check",
            service_type="cleaning",
            service_rate_cents=4500,
            service_rate_type="hourly",
        )
        db.add_all([hendersons, bakery])
        db.flush()

        today = date.today()
        weekly = Job(
            business_id=business.id,
            client_id=hendersons.id,
            date=today,
            time="9:00 AM",
            duration=3,
            amount_cents=14000,
            rate_type="flat",
            is_recurring=True,
            recurrence_rule="weekly",
        )
        monthly = Job(
            business_id=business.id,
            client_id=bakery.id,
            date=today + timedelta(days=2),
            time="6:00 PM",
            duration=4,
            amount_cents=4500,
            rate_type="hourly",
            is_recurring=True,
            recurrence_rule="monthly",
            recurrence_end_date=today + timedelta(days=365),
        )
        db.add_all([weekly, monthly])
        db.flush()
        weekly.series_id = str(weekly.id)
        monthly.series_id = str(monthly.id)
        db.add_all(
            [
                JobEmployee(job_id=weekly.id, employee_id=maria.id),
                JobEmployee(job_id=monthly.id, employee_id=maria.id),
                JobEmployee(job_id=monthly.id, employee_id=dev.id),
            ]
        )

        db.add(Expense(business_id=business.id, date=today, description="Microfiber cloths", amount_cents=3299, category="supplies", vendor="Costco"))

        db.commit()
        print("Seeded demo business/team/clients/recurring jobs")
    finally:
        db.close()


if __name__ == "__main__":
    run()
