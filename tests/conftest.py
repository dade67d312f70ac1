import os, sys, pytest
# Ensure project root is on path so 'repairdesk' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from repairdesk import create_app, get_db
from repairdesk.models.user import Base
# Import all model modules to ensure tables are registered before create_all
import repairdesk.models.work_order  # noqa: F401
import repairdesk.models.access_config  # noqa: F401
from tests.test_utils_seed import ADMIN_CODE, TECH_CODE

@pytest.fixture(scope='session', autouse=True)
def app_instance(tmp_path_factory):
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    blob_root = str(tmp_path_factory.mktemp('blobs'))
    app = create_app({'BLOB_ROOT': blob_root, 'BLOB_BASE_URL': '/blobs'})
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
        from repairdesk.services.access import ensure_access_codes
        ensure_access_codes(ADMIN_CODE, TECH_CODE)
    yield app

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()

@pytest.fixture()
def app_context(app_instance):
    with app_instance.app_context():
        yield app_instance
