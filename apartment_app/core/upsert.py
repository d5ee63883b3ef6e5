from sqlalchemy.dialects import postgresql, sqlite


def _insert_for(db, model):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"upsert is not supported on {dialect}")


def upsert(db, model, key: str, **values):
    """``INSERT ... ON CONFLICT (key) DO UPDATE`` for the session's dialect.

    The row identified by ``key`` ends up holding ``values`` whether or not
    it existed, in one statement.
    """
    stmt = _insert_for(db, model).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[key],
        set_={name: stmt.excluded[name] for name in values if name != key},
    )
