from werkzeug.security import check_password_hash

from data_siswa.models import db, User, buat_admin_default


def test_admin_default_dibuat_sekali(app):
    with app.app_context():
        assert User.query.filter_by(username="admin").count() == 1
        assert buat_admin_default("admin") is False
        assert User.query.count() == 1


def test_admin_lama_tidak_ditimpa(app):
    with app.app_context():
        admin = User.query.filter_by(username="admin").first()
        hash_lama = admin.password
        buat_admin_default("password-lain")
        assert User.query.filter_by(username="admin").first().password == hash_lama


def test_admin_dibuat_jika_belum_ada(app):
    with app.app_context():
        User.query.delete()
        db.session.commit()
        assert buat_admin_default("rahasia") is True
        admin = User.query.filter_by(username="admin").first()
        assert check_password_hash(admin.password, "rahasia")
