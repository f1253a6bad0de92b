# test/test_sqlalchemy.py
"""Composing SQLAlchemy statements and executing composites directly."""

import pytest
from sqlalchemy import Boolean, Column, ForeignKey, Integer, MetaData, String, Table, create_engine, select
from sqlalchemy.orm import Session

from composite import Composite

metadata = MetaData()

companies = Table(
    "companies",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String),
)

departments = Table(
    "departments",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String),
    Column("location", String),
    Column("company_id", ForeignKey("companies.id")),
)

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String),
    Column("active", Boolean),
    Column("department_id", ForeignKey("departments.id")),
)


def join_departments(query):
    return query.join(departments, departments.c.id == users.c.department_id)


def join_companies(query):
    return query.join(companies, companies.c.id == departments.c.company_id)


def order(query, value):
    if value == "department_name_asc":
        return query.order_by(departments.c.name.asc())
    return query.order_by(users.c.name.asc())


users_filter = (
    Composite.new()
    .param("name", lambda query, name: query.where(users.c.name == name))
    .param(["company", "name"], lambda query, name: query.where(companies.c.name == name), requires="companies")
    .param(
        "locations",
        lambda query, locations: query.where(departments.c.location.in_(locations)),
        requires="departments",
        ignore=lambda value: value in (None, []) or "Worldwide" in value,
    )
    .param(
        "order",
        order,
        requires=lambda value: "departments" if value == "department_name_asc" else None,
    )
    .dependency("companies", join_companies, requires="departments")
    .dependency("departments", join_departments)
)

users_query = select(users.c.id, users.c.name)


def sql(statement):
    return str(statement)


class TestComposingStatements:
    @pytest.mark.parametrize("params", [{}, {"locations": []}, {"locations": ["Worldwide"]}])
    def test_ignored_params_leave_the_query_untouched(self, params):
        assert sql(users_filter.apply(users_query, params)) == sql(users_query)

    def test_order_without_dependency(self):
        query = users_filter.apply(users_query, {"order": "username_asc"})
        assert sql(query) == sql(users_query.order_by(users.c.name.asc()))

    def test_order_with_dynamic_dependency(self):
        query = users_filter.apply(users_query, {"order": "department_name_asc"})
        expected = join_departments(users_query).order_by(departments.c.name.asc())
        assert sql(query) == sql(expected)
        assert "JOIN departments" in sql(query)

    def test_shared_joins_are_added_once(self):
        query = users_filter.apply(
            users_query,
            {
                "name": "John",
                "company": {"name": "Pear"},
                "locations": ["Ukraine", "Costa Rica"],
                "unused_param": "something",
            },
        )
        expected = (
            join_companies(join_departments(users_query))
            .where(users.c.name == "John")
            .where(companies.c.name == "Pear")
            .where(departments.c.location.in_(["Ukraine", "Costa Rica"]))
        )
        assert sql(query) == sql(expected)
        assert sql(query).count("JOIN departments") == 1

    def test_on_ignore_sets_a_default_order(self):
        composite = Composite.new().param(
            "order",
            lambda query, column: query.order_by(users.c[column]),
            on_ignore=lambda query: query.order_by(users.c.name),
        )
        assert sql(composite.apply(select(users), {"order": "id"})) == sql(select(users).order_by(users.c.id))
        assert sql(composite.apply(select(users), {"order": None})) == sql(select(users).order_by(users.c.name))

    def test_bound_pipeline(self):
        query = (
            Composite.bound(select(users.c.id, users.c.name), {"name": "John", "active": True})
            .param("name", lambda query, name: query.where(users.c.name == name))
            .param("active", lambda query: query.where(users.c.active.is_(True)), ignore=lambda value: not value)
            .apply()
        )
        expected = select(users.c.id, users.c.name).where(users.c.name == "John").where(users.c.active.is_(True))
        assert sql(query) == sql(expected)


class TestClauseElement:
    def test_applies_bound_composite(self):
        composite = Composite.bound(select(users), {"name": "John"}).param(
            "name", lambda query, name: query.where(users.c.name == name)
        )
        assert sql(composite.__clause_element__()) == sql(select(users).where(users.c.name == "John"))

    def test_table_result_becomes_a_select(self):
        composite = Composite.bound(users, {})
        assert sql(composite.__clause_element__()) == sql(select(users))


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(companies.insert(), [{"id": 1, "name": "Pear"}, {"id": 2, "name": "Macrohard"}])
        conn.execute(
            departments.insert(),
            [
                {"id": 1, "name": "IT", "location": "Ukraine", "company_id": 1},
                {"id": 2, "name": "Sales", "location": "Costa Rica", "company_id": 2},
            ],
        )
        conn.execute(
            users.insert(),
            [
                {"id": 1, "name": "John", "active": True, "department_id": 1},
                {"id": 2, "name": "Jane", "active": True, "department_id": 2},
                {"id": 3, "name": "Jack", "active": False, "department_id": 1},
            ],
        )
    with Session(engine) as session:
        yield session
    engine.dispose()


class TestExecution:
    def test_session_executes_a_bound_composite(self, session):
        composite = (
            Composite.bound(select(users.c.name).order_by(users.c.id), {"company": {"name": "Pear"}})
            .param(["company", "name"], lambda query, name: query.where(companies.c.name == name), requires="companies")
            .dependency("companies", join_companies, requires="departments")
            .dependency("departments", join_departments)
        )
        assert session.execute(composite).scalars().all() == ["John", "Jack"]

    def test_session_executes_a_table_composite(self, session):
        rows = session.execute(Composite.bound(users, {})).all()
        assert len(rows) == 3

    def test_connection_executes_a_bound_composite(self, session):
        composite = Composite.bound(select(users.c.name), {"active": True}).param(
            "active", lambda query, active: query.where(users.c.active == active)
        )
        rows = session.connection().execute(composite).scalars().all()
        assert sorted(rows) == ["Jane", "John"]

    def test_prepared_composite_against_database(self, session):
        query = users_filter.apply(users_query.order_by(users.c.id), {"locations": ["Costa Rica"]})
        assert [row.name for row in session.execute(query)] == ["Jane"]
