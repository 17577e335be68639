#!/usr/bin/env python3
"""Helper script to check the .env file and the settings the API will run with."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Supabase (record store)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
PIZZADESK_SUPABASE_URL=https://your-project-id.supabase.co
PIZZADESK_SUPABASE_KEY=your-service-role-key-here

# Google Maps (distance lookups and route planning); the `config` table overrides these
PIZZADESK_GOOGLE_MAPS_API_KEY=
PIZZADESK_PIZZERIA_ADDRESS=Rua Principal, 123, Centro

# Operational day: calendar | calendar_grace | night_shift
PIZZADESK_TIMEZONE=America/Sao_Paulo
PIZZADESK_SHIFT_POLICY=night_shift
PIZZADESK_SHIFT_START=18:00
PIZZADESK_SHIFT_END=02:30

# Restaurant login; generate with werkzeug.security.generate_password_hash
PIZZADESK_RESTAURANT_USERNAME=admin
PIZZADESK_RESTAURANT_PASSWORD_HASH=

PIZZADESK_DATA_ROOT=./data
"""

SECRET_NAMES = ("PIZZADESK_SUPABASE_KEY", "PIZZADESK_GOOGLE_MAPS_API_KEY", "PIZZADESK_RESTAURANT_PASSWORD_HASH")


def _mask(value: str) -> str:
    if len(value) > 20:
        return value[:8] + "..." + value[-4:]
    return "***"


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Pizzadesk Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"❌ .env file NOT found; created a template at: {env_file}")
        print("⚠️  Please edit .env and add your Supabase credentials!")
        return

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        name, sep, value = line.partition("=")
        if sep and name.strip() in SECRET_NAMES and value.strip():
            print(f"{name}={_mask(value.strip())}")
        else:
            print(line)
    print("-" * 60)
    print()

    for name in ("PIZZADESK_SUPABASE_URL", "PIZZADESK_SUPABASE_KEY"):
        status = "✅" if os.getenv(name) else "❌"
        print(f"{status} {name} {'set' if os.getenv(name) else 'not set'} in the process environment")
    print()

    try:
        sys.path.insert(0, str(project_root / "src"))
        from pizzadesk.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        return

    print(f"Shift policy: {settings.shift_policy} ({settings.timezone})")
    print(f"Maps key configured: {'yes' if settings.google_maps_api_key else 'no'}")
    print(f"Restaurant login enabled: {'yes' if settings.restaurant_password_hash else 'no'}")
    print()
    if settings.supabase_url and settings.supabase_key:
        print("✅ SUCCESS: Supabase is configured!")
    else:
        print("❌ ERROR: Supabase is NOT configured")
        print("Make sure variables start with the PIZZADESK_ prefix and restart the backend after editing .env")


if __name__ == "__main__":
    main()
