import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./designquote_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from designquote.main import app
from designquote.db.session import get_db
from designquote.models.base import Base
from designquote.models.user import User
from designquote.core.security import create_access_token, hash_password
from designquote.core.config import settings
from designquote.core.enums import UserRole


TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./designquote_test.db"
)

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)

AsyncSessionTest = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

TEST_PASSWORD = "s3cret-pass"


async def override_get_db():
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    app.dependency_overrides[get_db] = override_get_db
    
    yield
    
    app.dependency_overrides.clear()
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session(setup_db):
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
async def test_client(setup_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def user_password():
    return TEST_PASSWORD


async def _create_user(username, role, **kwargs):
    async with AsyncSessionTest() as session:
        user = User(
            username=username,
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
            **kwargs
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
async def admin_user(setup_db):
    return await _create_user("admin", UserRole.ADMIN, first_name="Ada", last_name="Admin")


@pytest.fixture
async def sales_user(setup_db):
    return await _create_user("alice", UserRole.SALES, first_name="Alice", last_name="Seller")


@pytest.fixture
async def sales_user_2(setup_db):
    return await _create_user("bob", UserRole.SALES)


@pytest.fixture
def admin_token(admin_user):
    return create_access_token(admin_user.id, admin_user.role)


@pytest.fixture
def sales_token(sales_user):
    return create_access_token(sales_user.id, sales_user.role)


@pytest.fixture
def sales_token_2(sales_user_2):
    return create_access_token(sales_user_2.id, sales_user_2.role)


@pytest.fixture
def expired_token(admin_user):
    return create_access_token(admin_user.id, admin_user.role, expires_minutes=-60)


@pytest.fixture
def create_project_type_factory(test_client, admin_token):
    async def _create_project_type(name="Business Website", base_price=1000.0, **kwargs):
        data = {"name": name, "base_price": base_price}
        data.update(kwargs)
        
        response = await test_client.post(
            "/project-types/",
            json=data,
            headers={"Authorization": f"Bearer {admin_token}"}
        )
        assert response.status_code == 201, response.text
        return response.json()
    
    return _create_project_type


@pytest.fixture
def create_feature_factory(test_client, admin_token):
    async def _create_feature(name="Contact Form", flat_price=1000.0, **kwargs):
        data = {"name": name, "pricing_type": "flat", "flat_price": flat_price}
        data.update(kwargs)
        
        response = await test_client.post(
            "/features/",
            json=data,
            headers={"Authorization": f"Bearer {admin_token}"}
        )
        assert response.status_code == 201, response.text
        return response.json()
    
    return _create_feature


@pytest.fixture
def create_page_factory(test_client, admin_token):
    async def _create_page(name="About", price_per_page=300.0, **kwargs):
        data = {"name": name, "price_per_page": price_per_page}
        data.update(kwargs)
        
        response = await test_client.post(
            "/pages/",
            json=data,
            headers={"Authorization": f"Bearer {admin_token}"}
        )
        assert response.status_code == 201, response.text
        return response.json()
    
    return _create_page


@pytest.fixture
def create_quote_factory(test_client):
    async def _create_quote(token, project_type_id, features=(), pages=(), **kwargs):
        header = {
            "project_type_id": project_type_id,
            "client_name": "Jane Client",
            "email": "jane@example.com",
        }
        header.update(kwargs)
        data = {
            "quote": header,
            "selected_features": list(features),
            "selected_pages": list(pages),
        }
        
        response = await test_client.post(
            "/quotes/",
            json=data,
            headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 201, response.text
        return response.json()
    
    return _create_quote


@pytest.fixture
def app_settings():
    """Return application settings"""
    return settings


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "crud: marks tests related to CRUD operations"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "reports: marks tests related to reporting"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
