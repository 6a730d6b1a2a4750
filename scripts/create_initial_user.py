"""Utility script to create the first administrator (or a member) account."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from kost_console.application.use_cases.users.create_user import create_user
from kost_console.domain.entities import ROLE_ADMIN, ROLE_MEMBER
from kost_console.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Create an initial user for the kost console.",
    )
    parser.add_argument(
        "--name",
        default="Pengelola Kost",
        help="Nama lengkap pengguna (default: Pengelola Kost)",
    )
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Alamat email pengguna (default: admin@example.com)",
    )
    parser.add_argument(
        "--phone",
        default=None,
        help="Nomor telepon pengguna (opsional)",
    )
    parser.add_argument(
        "--role",
        choices=(ROLE_ADMIN, ROLE_MEMBER),
        default=ROLE_ADMIN,
        help="Peran pengguna (default: admin)",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Kata sandi pengguna. Jika kosong akan diminta secara interaktif.",
    )
    return parser.parse_args()


def main() -> None:
    """Create a user using the provided command line arguments."""

    args = parse_args()

    password = args.password or getpass("Masukkan kata sandi pengguna: ")
    if not password:
        raise SystemExit("Kata sandi tidak valid.")

    initialize_database()

    session = SessionLocal()
    try:
        user = create_user(
            session,
            name=args.name,
            email=args.email,
            password=password,
            role_alias=args.role,
            phone=args.phone,
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Gagal membuat pengguna: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Gagal menyimpan pengguna ke database: {exc}") from exc
    else:
        print(
            "Pengguna berhasil dibuat:\n"
            f"  ID: {user.id}\n"
            f"  Nama: {user.name}\n"
            f"  Email: {user.email}\n"
            f"  Peran: {user.role.alias}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
