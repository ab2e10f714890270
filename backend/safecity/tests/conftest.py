import pytest

from sqlalchemy.pool import StaticPool
from flask_jwt_extended import create_access_token

from safecity import create_app
from safecity.config import TestConfig as BaseTestConfig
from safecity.extensions import db, bcrypt

# Register every mapper/table before create_all
import safecity.models  # noqa: F401
from safecity.models.comment import Comment
from safecity.models.enums import IncidentCategory, IncidentStatus, Role
from safecity.models.incident import Incident
from safecity.models.user import User


class PytestConfig(BaseTestConfig):
	SQLALCHEMY_DATABASE_URI = "sqlite://"
	SQLALCHEMY_ENGINE_OPTIONS = {
		"connect_args": {"check_same_thread": False},
		"poolclass": StaticPool,
	}
	JWT_SECRET_KEY = "test-secret"
	BCRYPT_LOG_ROUNDS = 4


@pytest.fixture()
def app():
	app = create_app(PytestConfig)
	with app.app_context():
		db.create_all()
		yield app
		db.session.remove()
		db.drop_all()


@pytest.fixture()
def client(app):
	return app.test_client()


@pytest.fixture()
def db_session(app):
	with app.app_context():
		yield db.session
		db.session.rollback()


@pytest.fixture()
def make_user(db_session):
	def _make_user(
		email: str,
		role: Role = Role.CITIZEN,
		first_name: str = "Test",
		last_name: str = "User",
		password: str = "Passw0rd!",
	):
		u = User(
			first_name=first_name,
			last_name=last_name,
			email=email,
			password_hash=bcrypt.generate_password_hash(password).decode("utf-8"),
			role=role,
		)
		db_session.add(u)
		db_session.commit()
		return u

	return _make_user


@pytest.fixture()
def make_incident(db_session):
	def _make_incident(
		user_id: int,
		description: str = "Broken street light on the corner",
		category: str = IncidentCategory.STREET_LIGHTING.value,
		status: IncidentStatus = IncidentStatus.PENDING,
		address: str | None = "Main St 100",
		upvotes: int = 0,
		created_at=None,
		assigned_to_id: int | None = None,
	):
		i = Incident(
			user_id=user_id,
			description=description,
			category=category,
			latitude=19.4326,
			longitude=-99.1332,
			address=address,
			status=status,
			upvotes=upvotes,
			assigned_to_id=assigned_to_id,
		)
		if created_at is not None:
			i.created_at = created_at
		db_session.add(i)
		db_session.commit()
		return i

	return _make_incident


@pytest.fixture()
def make_comment(db_session):
	def _make_comment(incident_id: int, user_id: int, content: str = "Same here", parent_id: int | None = None):
		c = Comment(incident_id=incident_id, user_id=user_id, content=content, parent_id=parent_id)
		db_session.add(c)
		db_session.commit()
		return c

	return _make_comment


@pytest.fixture()
def make_token(app):
	def _make_token(user) -> str:
		with app.app_context():
			return create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})

	return _make_token


@pytest.fixture()
def auth_header(make_token):
	def _auth_header(user) -> dict:
		token = make_token(user)
		return {"Authorization": f"Bearer {token}"}

	return _auth_header
