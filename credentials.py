# Credential store: user registration and password checks
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import ConflictError, StoreError, ValidationError
from extensions import bcrypt, db
from forms import clean, validate_email, validate_password, MIN_PASSWORD_LENGTH
from models import User


def register(username, email, password):
    """Create a user and return its public fields {id, username, email}.

    The password is stored as a bcrypt hash only. Uniqueness of username and
    email is checked before the insert and enforced again by the unique
    constraints, so a concurrent duplicate still ends as ConflictError.
    """
    if any(value is not None and not isinstance(value, str) for value in (username, email, password)):
        raise ValidationError("Invalid input")

    username = clean(username)
    email = clean(email).lower()
    if not username or not email or not password:
        raise ValidationError("Missing required fields")
    if not validate_email(email):
        raise ValidationError("Invalid email format")
    if not validate_password(password):
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if User.query.filter_by(username=username).first():
        raise ConflictError("Username already taken")
    if find_by_email(email):
        raise ConflictError("Email already registered")

    hashed_password = bcrypt.generate_password_hash(password).decode('utf-8')
    new_user = User(username=username, email=email, password_hash=hashed_password)

    try:
        db.session.add(new_user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already exists")
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError("Failed to register user") from e

    current_app.logger.info(f"Registered user {new_user.id} ({new_user.username})")
    return new_user.to_public_dict()


def find_by_email(email):
    return User.query.filter_by(email=clean(email).lower()).first()


def verify_password(plain, password_hash):
    return bcrypt.check_password_hash(password_hash, plain)


def authenticate(email, password):
    """Return the user for a correct email/password pair."""
    if not clean(email) or not password:
        raise ValidationError("Missing credentials")
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError("Invalid credentials")

    user = find_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        current_app.logger.info(f"Failed login for {clean(email)!r}")
        raise ValidationError("Invalid credentials")
    return user
