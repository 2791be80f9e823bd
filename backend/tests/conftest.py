import os, sys, pytest
# Ensure backend directory is on path so 'labtrack' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from datetime import datetime
import labtrack
from labtrack import create_app, get_db
from labtrack.models import Base

NOW = datetime(2025, 10, 15, 10, 30)


class FrozenClock:
    """Injectable clock; tests move it with set()."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime):
        self.now = now


@pytest.fixture(scope='session')
def clock():
    return FrozenClock(NOW)


@pytest.fixture(scope='session', autouse=True)
def app_instance(clock):
    app = create_app({
        'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
        'CLOCK': clock,
        'TESTING': True,
    })
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app


@pytest.fixture(autouse=True)
def clean_state(app_instance, clock):
    clock.set(NOW)
    session = get_db()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    # Fresh identity map: ids restart after the wipe
    labtrack.SessionLocal.remove()
    yield
    labtrack.SessionLocal.remove()


@pytest.fixture()
def session(app_instance):
    return get_db()


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
