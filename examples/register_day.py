"""
Example: A Day at the Register

Opens a register, records the day's movements, watches the check wallet
and closes with a cash count.
"""

import asyncio

from dotenv import load_dotenv
load_dotenv()

from ferrocash import FerroCash


async def main():
    """
    Walks through:
    1. Create a register and open a session
    2. Record movements
    3. Close and reconcile
    4. Check wallet alerts
    """
    print("=== FerroCash Register Day ===\n")

    async with FerroCash() as cash:
        # Step 1: Register and session
        register = await cash.registers.create_register("Front counter")
        session = await cash.open_session(register.id, "1000.00", "ana")
        print(f"Opened {register.name} with {session.opening_balance}")

        # Step 2: Movements
        for movement_type, amount in [("sale", "4500.00"), ("expense", "350.00"), ("transfer_out", "2000.00")]:
            movement = await cash.create_movement(
                session.id, register.id, movement_type, amount, user_id="ana"
            )
            print(f"  #{movement.sequence} {movement_type:<12} {amount:>10} -> {movement.running_balance}")

        summary = await cash.get_cash_register_summary(register.id)
        print(f"\nIncome {summary.total_income}, expense {summary.total_expense}")

        # Step 3: Close with a short count
        closed = await cash.close_session(session.id, "3100.00", "ana", notes="End of day")
        print(f"Expected {closed.expected_balance}, counted {closed.closing_balance}")
        if closed.difference:
            print(f"Difference: {closed.difference}")

        # Step 4: Checks
        today = cash.checks.today()
        await cash.create_check(
            check_type="echeq",
            check_number="E-0001",
            bank_name="Banco Provincia",
            amount="85000.00",
            issue_date=today.isoformat(),
            due_date=today.isoformat(),
            issuer_name="Constructora Norte SA",
        )
        for item in await cash.get_checks_with_alerts():
            print(f"\nCheck {item.check.check_number}: {item.alert_level.value} ({item.days_until_due} days)")


if __name__ == "__main__":
    asyncio.run(main())
