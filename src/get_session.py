"""Interactive login for the ``init-session`` command.

Authorizes the account by QR code or phone code (with 2FA) and returns a
portable STRING_SESSION value for the .env file. LOGIN_METHOD, PHONE and
2FA env vars skip the matching prompts.
"""

from __future__ import annotations

import os
from getpass import getpass

import qrcode
from telethon import TelegramClient, errors
from telethon.sessions import StringSession

QR_LOGIN_TIMEOUT = 120

_MENU = {"1": "qr", "2": "phone", "3": "exit"}


def _print_qr(url: str) -> None:
    code = qrcode.QRCode(border=1)
    code.add_data(url)
    code.make(fit=True)
    code.print_ascii(invert=True)


def _two_factor_password() -> str:
    return os.getenv("2FA") or getpass("2FA password (if enabled): ")


async def _login_qr(client: TelegramClient) -> None:
    login = await client.qr_login()
    _print_qr(login.url)
    await login.wait(timeout=QR_LOGIN_TIMEOUT)


async def _login_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (+countrycode...): ").strip()
    await client.send_code_request(phone)
    await client.sign_in(phone=phone, code=input("Telegram login code: ").strip())


def choose_login_method() -> str:
    """Return ``qr`` or ``phone`` from LOGIN_METHOD or an interactive menu."""

    preset = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if preset in ("qr", "phone"):
        return preset

    prompt = "\nLogin methods:\n[1] QR code\n[2] Phone code\n[3] Exit\ndaybrief > "
    while True:
        method = _MENU.get(input(prompt).strip())
        if method == "exit":
            raise SystemExit(0)
        if method:
            return method
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient) -> None:
    if await client.is_user_authorized():
        return

    login = _login_phone if choose_login_method() == "phone" else _login_qr
    try:
        await login(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_two_factor_password())


async def init_session(client: TelegramClient) -> str:
    """Log in interactively and return the session as a string."""

    await client.connect()
    try:
        await authorize(client)
        me = await client.get_me()
        print(f"Logged in as: {me.first_name}")
        return StringSession.save(client.session)
    finally:
        await client.disconnect()
