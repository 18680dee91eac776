# ======================== DATABASE MODELS ========================
# Berkas ini mendefinisikan tabel (models) untuk data siswa dan akun login.

from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash

# Inisialisasi objek SQLAlchemy
db = SQLAlchemy()

# Kolom siswa yang boleh diubah lewat form edit
KOLOM_EDIT = ("tingkat", "rombel", "tgl_masuk", "terdaftar")


# --- Model untuk data Siswa ---
class Siswa(db.Model):
    """
    Model ini merepresentasikan tabel 'siswa' di database.
    NIK dan NISN diperiksa keunikannya saat validasi form, bukan lewat
    constraint database.
    """
    __tablename__ = "siswa"

    id = db.Column(db.Integer, primary_key=True)
    nik = db.Column(db.String(16), index=True, nullable=False)   # 16 digit
    nisn = db.Column(db.String(10), index=True, nullable=False)  # 10 digit, kunci edit & hapus
    nama = db.Column(db.String(100))
    tingkat = db.Column(db.String(20))   # Tingkat kelas
    rombel = db.Column(db.String(50))    # Rombongan belajar
    tgl_masuk = db.Column(db.String(10))  # Format YYYY-MM-DD
    terdaftar = db.Column(db.String(20))  # Status terdaftar (Ya / Tidak)

    def to_dict(self):
        return {
            "nik": self.nik,
            "nisn": self.nisn,
            "nama": self.nama,
            "tingkat": self.tingkat,
            "rombel": self.rombel,
            "tgl_masuk": self.tgl_masuk,
            "terdaftar": self.terdaftar,
        }


# --- Model untuk akun login ---
class User(db.Model):
    """Akun admin. Password disimpan sebagai hash bersalt."""
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)


def buat_admin_default(password, logger=None):
    """
    Membuat user 'admin' jika belum ada. Jika sudah ada, data lama
    dibiarkan apa adanya. Mengembalikan True bila user baru dibuat.
    """
    admin = User.query.filter_by(username="admin").first()
    if admin:
        if logger:
            logger.info("Admin already exists")
        return False

    db.session.add(User(username="admin", password=generate_password_hash(password)))
    db.session.commit()
    if logger:
        logger.info("Default admin user created")
    return True
