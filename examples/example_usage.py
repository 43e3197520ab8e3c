"""Example: drive the service layer directly (no Flask).

Controllers are thin; the business rules live in the services wired by
``build_container``.
"""

from datetime import datetime

from geo_dateam.attendance.service import working_duration
from geo_dateam.container import build_container


def main():
    container = build_container({"STORE_BACKEND": "memory", "UPLOAD_DIR": "var/example-uploads"})

    alice = container.user_service.register(email="alice@example.com", password="secret1", name="Alice")
    record = container.attendance_service.clock_in(
        alice.user_id,
        latitude="48.8566",
        longitude="2.3522",
        location="Paris",
        now=datetime(2024, 3, 4, 9, 0),
    )
    record = container.attendance_service.clock_out(alice.user_id, now=datetime(2024, 3, 4, 17, 30))
    print(record.work_date, working_duration(record))

    expense = container.expense_service.submit(
        alice.user_id,
        expense_date="2024-03-04",
        amount="42.50",
        category="repas",
        description="Lunch with client",
    )
    print(container.expense_service.set_status(expense.expense_id, "approved"))
    print(container.report_service.admin_stats("2024-03-04"))


if __name__ == "__main__":
    main()
