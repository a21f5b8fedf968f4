import threading
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from backend.app.api.deps import get_db
from backend.app.db.base import Base
from backend.app.db.models import models_v1  # noqa: F401  (tables)
from backend.app.db.models.core_types import ProductCategory, Role, UserStatus
from backend.app.db.session import build_engine
from backend.app.main import app
from backend.services import catalog, inventory, recipes


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Base SQLite fichier, neuve pour chaque test.

    Même fabrique d'engine que l'application (FK actives, timeout borné).
    """
    eng = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}", timeout=5)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def run_concurrently(session_factory):
    """
    Lance `work(session)` dans N threads, chacun avec sa propre session,
    tous relâchés en même temps par une barrière. Retourne les erreurs levées.
    """

    def _run(n, work):
        barrier = threading.Barrier(n)
        errors = []

        def _worker():
            db = session_factory()
            try:
                barrier.wait(timeout=10)
                work(db)
            except Exception as exc:
                errors.append(exc)
            finally:
                db.close()

        threads = [threading.Thread(target=_worker) for _ in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)
        assert not any(t.is_alive() for t in threads), "worker thread still running"
        return errors

    return _run


# ---------- FACTORIES ----------
@pytest.fixture
def cashier(db_session):
    return catalog.create_user(db_session, name="Kasir", email="kasir@test.cafe", role=Role.kasir)


@pytest.fixture
def buyer(db_session):
    return catalog.create_user(db_session, name="Pengadaan", email="pengadaan@test.cafe", role=Role.pengadaan)


@pytest.fixture
def inactive_user(db_session):
    return catalog.create_user(
        db_session,
        name="Ex Kasir",
        email="ex@test.cafe",
        role=Role.kasir,
        status=UserStatus.nonaktif,
    )


@pytest.fixture
def make_material(db_session):
    def _make(name="MAT-FLOUR", stock="10", min_stock="5", unit="kg"):
        return inventory.create_material(
            db_session,
            name=name,
            unit=unit,
            stock=Decimal(stock),
            min_stock=Decimal(min_stock),
        )

    return _make


@pytest.fixture
def make_product(db_session):
    def _make(name="Croissant", price="22000", recipe=None, category=ProductCategory.makanan):
        product = catalog.create_product(db_session, name=name, price=Decimal(price), category=category)
        for material_id, qty in (recipe or {}).items():
            recipes.add_recipe_line(db_session, product.id, material_id, Decimal(qty))
        return product

    return _make
