# tests/conftest.py
"""
Shared fixtures: an in-memory SQLite database shaped like the hosted schema.
"""

import hashlib

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from sales_ops.gateway import SalesGateway

AGENTS = [
    (1, 'Alice Mwale', 'Lusaka', '0971000001', '2024-01-05 09:00:00'),
    (2, 'bob banda', 'Ndola', '0971000002', '2024-01-10 09:00:00'),
    (3, 'Chanda Phiri', None, None, None),
    (12, 'Dora Zulu', 'Kitwe', '0971000012', '2024-02-01 09:00:00'),
]

CUSTOMERS = [
    (101, 'John Tembo', '0977000101', 1, '2024-01-20 10:00:00'),
    (102, 'jane tembo', '0977000102', 1, '2024-01-21 10:00:00'),
    (103, 'Peter Mulenga', '0977000103', 2, '2024-01-22 10:00:00'),
    (104, 'Mary 12 Banda', None, 12, '2024-01-23 10:00:00'),
    (105, 'Orphan Customer', '0977000105', 99, None),
    (112, 'Grace Lungu', '0977000112', 2, '2024-01-25 10:00:00'),
]

USER_SALT = 'pepper'
USER_PASSWORD = 's3cret!'


def _hash(password: str, salt: str) -> str:
    return hashlib.sha256((password + salt).encode()).hexdigest()


def _create_schema(conn):
    conn.execute(text(
        'CREATE TABLE "Agent" ("Agent ID" INTEGER PRIMARY KEY, "Full Name" TEXT, '
        '"Location" TEXT, "Phone Number" TEXT, created_at TEXT)'
    ))
    conn.execute(text(
        'CREATE TABLE "Customer_Data" ("Customer ID" INTEGER PRIMARY KEY, '
        '"Customer_Name" TEXT, "Customer_Mobile" TEXT, "Agent ID" INTEGER, "Created at" TEXT)'
    ))
    conn.execute(text(
        'CREATE TABLE dashboard_users (id INTEGER PRIMARY KEY, email TEXT, full_name TEXT, '
        'organization TEXT, account_number TEXT, password_hash TEXT, password_salt TEXT, '
        'is_active BOOLEAN, last_login TEXT)'
    ))


def make_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def engine():
    """Seeded database with a few agents, customers and dashboard users."""
    eng = make_engine()
    with eng.begin() as conn:
        _create_schema(conn)
        conn.execute(
            text('INSERT INTO "Agent" VALUES (:id, :name, :loc, :phone, :created)'),
            [dict(zip(('id', 'name', 'loc', 'phone', 'created'), row)) for row in AGENTS],
        )
        conn.execute(
            text('INSERT INTO "Customer_Data" VALUES (:id, :name, :mobile, :agent, :created)'),
            [dict(zip(('id', 'name', 'mobile', 'agent', 'created'), row)) for row in CUSTOMERS],
        )
        conn.execute(
            text(
                'INSERT INTO dashboard_users VALUES (:id, :email, :full_name, :org, :acct, '
                ':hash, :salt, :active, NULL)'
            ),
            [
                {'id': 7, 'email': 'Ops.Lead@Acme.io', 'full_name': 'Ops Lead', 'org': None,
                 'acct': None, 'hash': _hash(USER_PASSWORD, USER_SALT), 'salt': USER_SALT,
                 'active': True},
                {'id': 8, 'email': 'gone@acme.io', 'full_name': 'Former User', 'org': 'Acme',
                 'acct': '#SD0008', 'hash': _hash(USER_PASSWORD, USER_SALT), 'salt': USER_SALT,
                 'active': False},
            ],
        )
    yield eng
    eng.dispose()


@pytest.fixture
def bulk_engine():
    """2,500 customers spread over two agents, for batched export tests."""
    eng = make_engine()
    with eng.begin() as conn:
        _create_schema(conn)
        conn.execute(
            text('INSERT INTO "Agent" VALUES (:id, :name, NULL, NULL, NULL)'),
            [{'id': 1, 'name': 'Alice'}, {'id': 2, 'name': 'Bob'}],
        )
        conn.execute(
            text('INSERT INTO "Customer_Data" VALUES (:id, :name, :mobile, :agent, :created)'),
            [
                {'id': i, 'name': f'Customer {i:04d}', 'mobile': f'09{i:08d}',
                 'agent': 1 + i % 2, 'created': '2024-01-01 00:00:00'}
                for i in range(1, 2501)
            ],
        )
    yield eng
    eng.dispose()


@pytest.fixture
def gateway(engine):
    return SalesGateway(engine=engine)


@pytest.fixture
def bulk_gateway(bulk_engine):
    return SalesGateway(engine=bulk_engine)
