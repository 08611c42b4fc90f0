# tests/conftest.py
import logging

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from config.config import TestConfig
from extensions import db, socketio
from models import Batch, Student
from utils.seed_data import seed_admin

FEBRUARY_PLAN = {"classes": 4, "labs": 2, "exams": 1, "mocks": 1}


def pytest_configure(config):
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        seed_admin()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, identifier, credential, role="student"):
    return client.post(
        "/api/login",
        json={"identifier": identifier, "credential": credential, "role": role},
    )


@pytest.fixture
def admin_client(client):
    response = login(client, TestConfig.ADMIN_USERNAME, TestConfig.ADMIN_PASSWORD, role="admin")
    assert response.status_code == 200
    return client


@pytest.fixture
def batches(app):
    b1 = Batch(
        id="B1",
        batch_number="MCD-01",
        attendance_types=["class", "lab"],
        monthly_data={"2024-02": dict(FEBRUARY_PLAN)},
    )
    b2 = Batch(id="B2", batch_number="MCD-02", attendance_types=["class"], monthly_data={})
    db.session.add_all([b1, b2])
    db.session.commit()
    return b1, b2


def make_student(system_id, batch_id, name, mobile):
    return Student(
        id=system_id,
        student_id=f"EXT-{system_id}",
        name=name,
        email=f"{system_id.lower()}@example.com",
        mobile=mobile,
        batch_id=batch_id,
        active=True,
        password_hash=generate_password_hash(mobile),
        education=[],
    )


@pytest.fixture
def students(batches):
    s1 = make_student("S1", "B1", "Asha Rao", "9000000001")
    s2 = make_student("S2", "B1", "Ravi Kumar", "9000000002")
    s3 = make_student("S3", "B2", "Meena Iyer", "9000000003")
    db.session.add_all([s1, s2, s3])
    db.session.commit()
    return s1, s2, s3


@pytest.fixture
def student_client(app, students):
    client = app.test_client()
    response = login(client, "s1@example.com", "9000000001")
    assert response.status_code == 200
    return client


@pytest.fixture
def socket_client(app):
    client = socketio.test_client(app)
    assert client.is_connected()
    client.get_received()
    yield client
    if client.is_connected():
        client.disconnect()


def received_events(socket_client):
    return [event["name"] for event in socket_client.get_received()]
