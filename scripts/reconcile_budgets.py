"""Recompute every budget's spent total from its expenses"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import tripledger modules
sys.path.append(str(Path(__file__).parent.parent))

import tripledger.models  # noqa: F401
from tripledger.database import AsyncSessionLocal, engine
from tripledger.services.budget_service import BudgetService


async def main():
    print("🔎 Reconciling budget totals...\n")

    try:
        async with AsyncSessionLocal() as session:
            budgets = await BudgetService.reconcile_spent(session)
        for budget in budgets:
            print(f"  {budget.name} ({budget.id}): spent {budget.spent} of {budget.amount} {budget.currency}")
        print(f"\n✨ Checked {len(budgets)} budgets")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
