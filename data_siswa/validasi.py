# ======================== VALIDASI FORM ========================
# Aturan validasi per field. Setiap field punya daftar aturan yang dicek
# berurutan; field berhenti di aturan pertama yang gagal, tapi error dari
# semua field tetap dikumpulkan.

import re
from collections import namedtuple
from datetime import date, datetime

from data_siswa.models import Siswa

FORMAT_TANGGAL = "%Y-%m-%d"
TANGGAL_MASUK_MAKS = date(2025, 11, 26)

# Aturan biasa: cek(nilai) -> bool
Aturan = namedtuple("Aturan", ["cek", "pesan"])


class AturanUnik:
    """Aturan yang butuh query ke tabel siswa: gagal jika nilai sudah dipakai."""

    def __init__(self, kolom, pesan):
        self.kolom = kolom
        self.pesan = pesan

    def cek(self, nilai):
        return Siswa.query.filter_by(**{self.kolom: nilai}).first() is None


# ======================== PREDIKAT ========================
def wajib_isi(nilai):
    return bool(nilai)


def panjang(n):
    return lambda nilai: len(nilai) == n


def angka(nilai):
    return re.fullmatch(r"[0-9]+", nilai) is not None


def parse_tanggal(nilai):
    """Mengubah string YYYY-MM-DD menjadi date. Mengembalikan None jika tidak valid."""
    try:
        return datetime.strptime(nilai.strip(), FORMAT_TANGGAL).date()
    except ValueError:
        return None


def format_tanggal(nilai):
    # Kosong dianggap lolos; kewajiban isi diatur aturan tersendiri
    return not nilai or parse_tanggal(nilai) is not None


def tidak_melebihi(batas):
    def cek(nilai):
        tanggal = parse_tanggal(nilai) if nilai else None
        return tanggal is None or tanggal <= batas
    return cek


def pesan_batas_tanggal(batas):
    bulan = ["Januari", "Februari", "Maret", "April", "Mei", "Juni", "Juli",
             "Agustus", "September", "Oktober", "November", "Desember"]
    return "Tanggal masuk tidak boleh melebihi %d %s %d!" % (
        batas.day, bulan[batas.month - 1], batas.year
    )


# ======================== KUMPULAN ATURAN ========================
def aturan_tambah(batas=TANGGAL_MASUK_MAKS):
    """Aturan untuk form tambah siswa."""
    return [
        ("nik", [
            Aturan(panjang(16), "NIK harus 16 digit!"),
            Aturan(angka, "NIK harus berupa angka!"),
            AturanUnik("nik", "NIK Sudah Digunakan!"),
        ]),
        ("nisn", [
            Aturan(panjang(10), "NISN harus 10 digit!"),
            Aturan(angka, "NISN harus berupa angka!"),
            AturanUnik("nisn", "NISN Sudah Digunakan!"),
        ]),
        ("tgl_masuk", [
            Aturan(format_tanggal, "Format tanggal masuk tidak valid!"),
            Aturan(tidak_melebihi(batas), pesan_batas_tanggal(batas)),
        ]),
    ]


def aturan_edit(batas=TANGGAL_MASUK_MAKS):
    """Aturan untuk form edit siswa. Hanya tanggal masuk yang dicek."""
    return [
        ("tgl_masuk", [
            Aturan(wajib_isi, "Tanggal masuk harus diisi!"),
            Aturan(format_tanggal, "Format tanggal masuk tidak valid!"),
            Aturan(tidak_melebihi(batas), pesan_batas_tanggal(batas)),
        ]),
    ]


def aturan_login():
    return [
        ("username", [Aturan(wajib_isi, "Username harus diisi!")]),
        ("password", [Aturan(wajib_isi, "Password harus diisi!")]),
    ]


# ======================== EKSEKUSI ========================
def validasi(form, daftar_aturan):
    """
    Menjalankan aturan terhadap data form.

    Aturan biasa semua field dicek lebih dulu. Aturan unik (query database)
    hanya dijalankan untuk field yang lolos aturan biasa. Hasilnya daftar
    error berurutan sesuai urutan field: [{"field": ..., "message": ...}].
    """
    error_per_field = {}
    tertunda = []

    for field, aturan in daftar_aturan:
        nilai = form.get(field) or ""
        for a in aturan:
            if isinstance(a, AturanUnik):
                tertunda.append((field, nilai, a))
                continue
            if not a.cek(nilai):
                error_per_field[field] = a.pesan
                break

    for field, nilai, a in tertunda:
        if field in error_per_field:
            continue
        if not a.cek(nilai):
            error_per_field[field] = a.pesan

    return [
        {"field": field, "message": error_per_field[field]}
        for field, _ in daftar_aturan
        if field in error_per_field
    ]
