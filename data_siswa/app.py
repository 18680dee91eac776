# ======================== IMPORTS & SETUP APLIKASI ========================
import io
import os
from collections import namedtuple
from datetime import date, datetime, timedelta
from functools import wraps

import pandas as pd
from flask import (
    Flask,
    render_template,
    request,
    redirect,
    url_for,
    session,
    send_file,
    flash,
    get_flashed_messages,
    g,
    abort,
)
from werkzeug.security import check_password_hash

from data_siswa.models import db, Siswa, User, KOLOM_EDIT, buat_admin_default
from data_siswa.validasi import aturan_login, aturan_tambah, aturan_edit, validasi

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "data_siswa_secret")
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get("DATABASE_URL", "sqlite:///data_siswa.db")
# Umur cookie session, bawaan 6 menit
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(
    minutes=int(os.environ.get("SESSION_LIFETIME_MINUTES", "6"))
)
app.config['ADMIN_PASSWORD'] = os.environ.get("ADMIN_PASSWORD", "admin")
app.config['TANGGAL_MASUK_MAKS'] = datetime.strptime(
    os.environ.get("TANGGAL_MASUK_MAKS", "2025-11-26"), "%Y-%m-%d"
).date()
db.init_app(app)

with app.app_context():
    db.create_all()
    buat_admin_default(app.config['ADMIN_PASSWORD'], app.logger)

# Identitas user yang sedang login, dibaca dari session di setiap request
Pengguna = namedtuple("Pengguna", ["id", "username"])

KOLOM_SISWA = ("nik", "nisn", "nama", "tingkat", "rombel", "tgl_masuk", "terdaftar")


# ======================== FUNGSI HELPER ========================
@app.before_request
def muat_pengguna():
    """Mengisi g.pengguna dari session, atau None jika belum login."""
    if "user_id" in session:
        g.pengguna = Pengguna(session["user_id"], session.get("username"))
    else:
        g.pengguna = None


def login_required(f):
    """
    Decorator untuk route yang butuh login. Jika belum login, request
    dihentikan dan user diarahkan ke halaman login.
    """
    @wraps(f)
    def wrapped(*args, **kwargs):
        if g.get("pengguna") is None:
            flash("Silakan login terlebih dahulu!")
            return redirect(url_for("login"))
        return f(*args, **kwargs)
    return wrapped


def ambil_form_siswa():
    """Mengambil field siswa dari form, field yang tidak dikirim diabaikan."""
    return {k: request.form[k] for k in KOLOM_SISWA if k in request.form}


# ======================== AUTENTIKASI ADMIN ========================
@app.route("/login", methods=["GET", "POST"])
def login():
    """Rute untuk halaman dan proses login admin."""
    if request.method == "GET":
        if g.pengguna is not None:
            return redirect(url_for("home"))
        return render_template("login.html", title="Login Page", pesan=get_flashed_messages())

    errors = validasi(request.form, aturan_login())
    if errors:
        return render_template("login.html", title="Login Page", errors=errors)

    username = request.form["username"]
    password = request.form["password"]
    try:
        user = User.query.filter_by(username=username).first()
        if not user or not check_password_hash(user.password, password):
            app.logger.warning("Login gagal untuk username %r", username)
            return render_template(
                "login.html",
                title="Login Page",
                errors=[{"field": None, "message": "Username atau password salah!"}],
            )
    except Exception:
        app.logger.exception("Error saat proses login")
        return render_template(
            "login.html",
            title="Login Page",
            errors=[{"field": None, "message": "Terjadi kesalahan server!"}],
        )

    session.clear()
    session.permanent = True
    session["user_id"] = user.id
    session["username"] = user.username
    app.logger.info("User %s login", user.username)

    flash("Login berhasil!")
    return redirect(url_for("home"))


@app.route("/logout")
def logout():
    """Rute untuk logout, menghapus seluruh isi session."""
    if g.pengguna is not None:
        app.logger.info("User %s logout", g.pengguna.username)
    session.clear()
    return redirect(url_for("login"))


# ======================== HALAMAN UMUM ========================
@app.route("/")
@login_required
def home():
    """Halaman utama dengan ringkasan data siswa."""
    return render_template(
        "home.html",
        title="Home Page",
        nama=g.pengguna.username or "Admin",
        siswas=Siswa.query.all(),
    )


@app.route("/about")
def about():
    return render_template("about.html", title="About Page")


# ======================== KELOLA SISWA (CRUD) ========================
@app.route("/data-siswa", methods=["GET", "POST", "PUT", "DELETE"])
@login_required
def data_siswa():
    """
    Mengelola data siswa.
    - GET: Menampilkan daftar siswa.
    - POST: Menambah siswa.
    - PUT / DELETE: Mengubah / menghapus siswa berdasarkan NISN. Form HTML
      mengirimnya sebagai POST dengan field _method.
    """
    metode = request.method
    if metode == "POST":
        metode = request.form.get("_method", "POST").upper()

    if metode == "POST":
        return tambah_siswa()
    if metode == "PUT":
        return ubah_siswa()
    if metode == "DELETE":
        return hapus_siswa()
    if metode != "GET":
        abort(405)

    return render_template("data_siswa.html", title="Data Siswa", siswas=Siswa.query.all())


@app.route("/data-siswa/add")
@login_required
def form_tambah_siswa():
    return render_template("add_siswa.html", title="Add Data Siswa Form")


def tambah_siswa():
    data = ambil_form_siswa()
    errors = validasi(request.form, aturan_tambah(app.config['TANGGAL_MASUK_MAKS']))
    if errors:
        return render_template(
            "add_siswa.html", title="Add Data Siswa Form", errors=errors, siswa=data
        )

    db.session.add(Siswa(**data))
    db.session.commit()
    app.logger.info("Siswa NISN %s ditambahkan", data.get("nisn"))

    flash("Data Siswa berhasil ditambahkan!")
    return redirect(url_for("data_siswa"))


@app.route("/data-siswa/edit/<nisn>")
@login_required
def form_edit_siswa(nisn):
    """
    Form edit siswa. Jika NISN tidak ditemukan, form tetap ditampilkan
    dengan siswa=None.
    """
    siswa = Siswa.query.filter_by(nisn=nisn).first()
    return render_template("edit_siswa.html", title="Edit Data Siswa Form", siswa=siswa)


def ubah_siswa():
    data = ambil_form_siswa()
    errors = validasi(request.form, aturan_edit(app.config['TANGGAL_MASUK_MAKS']))
    if errors:
        return render_template(
            "edit_siswa.html", title="Edit Data Siswa Form", errors=errors, siswa=data
        )

    nisn = request.form.get("nisn")
    perubahan = {k: request.form[k] for k in KOLOM_EDIT if k in request.form}
    jumlah = Siswa.query.filter_by(nisn=nisn).update(perubahan, synchronize_session=False)
    db.session.commit()
    if jumlah == 0:
        app.logger.warning("Edit siswa: NISN %s tidak ditemukan, tidak ada data diubah", nisn)
    else:
        app.logger.info("Siswa NISN %s diubah", nisn)

    flash("Data Siswa berhasil diedit!")
    return redirect(url_for("data_siswa"))


def hapus_siswa():
    nisn = request.form.get("nisn")
    # Hanya satu data yang dihapus walaupun NISN ganda
    siswa = Siswa.query.filter_by(nisn=nisn).first()
    if siswa:
        db.session.delete(siswa)
        db.session.commit()
        app.logger.info("Siswa NISN %s dihapus", nisn)

    flash("Data Siswa berhasil dihapus!")
    return redirect(url_for("data_siswa"))


# ======================== EKSPOR DATA EXCEL ========================
@app.route("/data-siswa/export")
@login_required
def export_siswa():
    """Mengunduh seluruh data siswa dalam bentuk file Excel."""
    semua_siswa = Siswa.query.order_by(Siswa.nama.asc()).all()
    if not semua_siswa:
        flash("Belum ada data siswa untuk diekspor")
        return redirect(url_for("data_siswa"))

    df = pd.DataFrame([s.to_dict() for s in semua_siswa], columns=list(KOLOM_SISWA))
    df.columns = ["NIK", "NISN", "Nama", "Tingkat", "Rombel", "Tanggal Masuk", "Terdaftar"]
    df.fillna('-', inplace=True)

    file_io = io.BytesIO()
    df.to_excel(file_io, index=False, sheet_name="Data Siswa")
    file_io.seek(0)
    app.logger.info("Ekspor %d data siswa", len(df))

    filename = f"Data_Siswa_{date.today().isoformat()}.xlsx"
    return send_file(
        file_io,
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        as_attachment=True,
        download_name=filename,
    )


# ======================== MAIN ========================
if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=int(os.environ.get("PORT", 3000)))
