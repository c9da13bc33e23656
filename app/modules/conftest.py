import uuid

import pytest

from app import create_app, db
from app.modules.auth.models import User
from app.modules.upload.exceptions import TransferCancelled
from app.modules.upload.services import upload_registry


class ManualExecutor:
    """Executor that only runs submitted work when a test asks it to."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        self.pending.append((fn, args, kwargs))

    def run_next(self):
        fn, args, kwargs = self.pending.pop(0)
        return fn(*args, **kwargs)

    def run_all(self):
        while self.pending:
            self.run_next()


class ScriptedTransport:
    """Reports a transfer in ``steps`` equal chunks without touching storage.

    ``hooks`` maps a file name to a callable run after each reported step.
    Names in ``fail_for`` break off halfway through.
    """

    def __init__(self, steps=4, fail_for=(), honour_cancel=True):
        self.steps = steps
        self.fail_for = set(fail_for)
        self.honour_cancel = honour_cancel
        self.hooks = {}
        self.stored = []

    def transfer(self, source, on_progress, cancelled):
        chunk = max(1, source.file_size // self.steps)
        sent = 0
        for step in range(1, self.steps + 1):
            if self.honour_cancel and cancelled.is_set():
                raise TransferCancelled(source.file_name)
            sent = source.file_size if step == self.steps else min(source.file_size, sent + chunk)
            on_progress(sent)
            hook = self.hooks.get(source.file_name)
            if hook is not None:
                hook(step)
            if source.file_name in self.fail_for and step == max(1, self.steps // 2):
                raise ConnectionError("connection reset by storage")
        file_id = uuid.uuid4().hex
        self.stored.append(file_id)
        return file_id

    def download_url(self, file_id):
        return f"https://storage.test/builds/download?id={file_id}"


@pytest.fixture(scope="session")
def test_app():
    """Create and configure a new app instance for each test session."""
    test_app = create_app("testing")

    with test_app.app_context():
        yield test_app


@pytest.fixture(scope="module")
def test_client(test_app):

    with test_app.test_client() as testing_client:
        with test_app.app_context():
            db.drop_all()
            db.create_all()
            """
            The test suite always includes the following user in order to avoid repetition
            of its creation
            """
            user_test = User(email="test@example.com", password="test1234")
            db.session.add(user_test)
            db.session.commit()

            yield testing_client

            db.session.remove()
            db.drop_all()


@pytest.fixture(scope="function")
def clean_database():
    db.session.remove()
    db.drop_all()
    db.create_all()
    yield
    db.session.remove()
    db.drop_all()
    db.create_all()


def login(test_client, email, password):
    """
    Authenticates the user with the credentials provided.

    Args:
        test_client: Flask test client.
        email (str): User's email address.
        password (str): User's password.

    Returns:
        response: POST login request response.
    """
    response = test_client.post("/login", json=dict(email=email, password=password))
    return response


def logout(test_client):
    """
    Logs out the user.

    Args:
        test_client: Flask test client.

    Returns:
        response: GET logout request response.
    """
    return test_client.get("/logout")


@pytest.fixture(scope="function")
def upload_executor():
    return ManualExecutor()


@pytest.fixture(scope="function")
def scripted_transport(upload_executor):
    """Route the upload endpoints through a ScriptedTransport and a ManualExecutor."""
    transport = ScriptedTransport()
    upload_registry.configure(transport=transport, executor=upload_executor)
    yield transport
    upload_registry.configure()


def create_user(email, password="test1234", display_name="Pixel Forge", user_type="developer"):
    from app.modules.auth.services import AuthenticationService

    return AuthenticationService().create_with_profile(
        email=email, password=password, display_name=display_name, user_type=user_type
    )
