import os, sys, pytest
# Ensure backend directory is on path so 'portal' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from portal import create_app, get_db
from portal.models.authz import Base
# Import all model modules to ensure tables are registered before create_all
import portal.models.audit  # noqa: F401


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({'LOG_LEVEL': 'DEBUG'})
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
        from tests.test_utils_seed import seed_catalog
        seed_catalog()
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def catalog():
    from portal.services.catalog import catalog_from_constants
    return catalog_from_constants()


@pytest.fixture()
def resolver(catalog):
    from portal.services.closure import ClosureResolver, DecompositionRules
    return ClosureResolver(catalog, DecompositionRules.from_constants())
