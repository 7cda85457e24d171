"""Database seeding script (demo users and one shared trip)"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import tripledger modules
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import select
import tripledger.models  # noqa: F401
from tripledger.core.security import create_access_token
from tripledger.database import AsyncSessionLocal, Base, engine
from tripledger.models.user import User
from tripledger.schemas.trip import TripCreate
from tripledger.services.trip_service import TripService
from tripledger.repositories.participant_repository import ParticipantRepository
from tripledger.models.participant import Participant, ParticipantRole


async def seed_users(session):
    """Seed the database with demo accounts"""

    users_data = [
        {"email": "ana@example.com", "first_name": "Ana", "last_name": "Lopez"},
        {"email": "beto@example.com", "first_name": "Beto", "last_name": "Diaz"},
        {"email": "cami@example.com", "first_name": "Cami", "last_name": "Ruiz"},
    ]

    users = []
    for user_data in users_data:
        result = await session.execute(select(User).where(User.email == user_data["email"]))
        existing_user = result.scalar_one_or_none()

        if existing_user:
            print(f"  ⏭️  User '{user_data['email']}' already exists, skipping...")
            users.append(existing_user)
            continue

        new_user = User(is_active=True, **user_data)
        session.add(new_user)
        print(f"  ✅ Created user '{user_data['email']}'")
        users.append(new_user)

    await session.commit()
    return users


async def seed_trip(session, owner, members):
    """Create a demo trip owned by `owner` with `members` joined"""
    trip = await TripService.create_trip(
        TripCreate(name="Demo trip", base_currency="USD"), owner.id, session
    )
    for member in members:
        await ParticipantRepository.create(
            session, Participant(trip_id=trip.id, user_id=member.id, role=ParticipantRole.MEMBER)
        )
    await session.commit()
    print(f"  ✅ Created trip '{trip.name}' ({trip.id}) with {len(members) + 1} participants")
    return trip


async def main():
    """Main function to run seeding"""
    print("🌱 Seeding database with demo data...\n")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with AsyncSessionLocal() as session:
            users = await seed_users(session)
            await seed_trip(session, users[0], users[1:])

        print("\n🔐 Bearer tokens:")
        for user in users:
            print(f"  {user.email}: {create_access_token(user.id)}")

        print("\n✨ Database seeding completed successfully!")
    except Exception as e:
        print(f"\n❌ Error seeding database: {str(e)}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
