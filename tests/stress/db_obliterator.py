import asyncio
import os
import sys

sys.path.append(os.getcwd())
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from minepanel.db.session import async_session_factory

# 💀 DB OBLITERATOR: DUPLICATE-ACCOUNT RACE
# Many concurrent transactions try to claim the same username; the unique
# constraint must let at most one through and roll the rest back cleanly.

async def chaos_transaction(n: int):
    async with async_session_factory() as session:
        txn = await session.begin()
        try:
            await session.execute(
                text("INSERT INTO users (username, hashed_password, role) VALUES ('chaos_user', 'x', 'ADMIN')")
            )
            await txn.commit()
            print(f"[{n}] committed (expected for exactly one transaction)")
        except IntegrityError as e:
            await txn.rollback()
            print(f"[{n}] ✅ cleanly rolled back: {e.orig}")

async def mass_rollback_test():
    print("💀 LAUNCHING 100 CONCURRENT TRANSACTIONS FOR ONE USERNAME...")
    await asyncio.gather(*(chaos_transaction(n) for n in range(100)))
    async with async_session_factory() as session:
        count = await session.scalar(text("SELECT COUNT(*) FROM users WHERE username = 'chaos_user'"))
        print(f"Rows for chaos_user: {count} (must be 1)")
        await session.execute(text("DELETE FROM users WHERE username = 'chaos_user'"))
        await session.commit()

if __name__ == "__main__":
    asyncio.run(mass_rollback_test())
