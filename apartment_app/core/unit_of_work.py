from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError


@asynccontextmanager
async def unit_of_work(db):
    """Commit the statements issued inside the block together, or none of them."""
    try:
        yield db
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
