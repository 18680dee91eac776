import os

# Harus di-set sebelum data_siswa.app di-import
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test"

import pytest

from data_siswa.app import app as flask_app
from data_siswa.models import db, Siswa, buat_admin_default


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        buat_admin_default(flask_app.config["ADMIN_PASSWORD"])
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def do_login(username="admin", password="admin"):
        return client.post("/login", data={"username": username, "password": password})
    return do_login


@pytest.fixture
def siswa_contoh():
    return {
        "nik": "3201234567890123",
        "nisn": "1234567890",
        "nama": "Budi Santoso",
        "tingkat": "10",
        "rombel": "X IPA 1",
        "tgl_masuk": "2024-07-15",
        "terdaftar": "Ya",
    }


@pytest.fixture
def jumlah_siswa(app):
    def hitung():
        with app.app_context():
            return Siswa.query.count()
    return hitung
