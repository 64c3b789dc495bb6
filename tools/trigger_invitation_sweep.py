# tools/trigger_invitation_sweep.py
# Runs the invitation expiry sweep once through the internal API, the same
# call the external cron makes. Useful after changing INVITATION_EXPIRY_DAYS.

import os
import sys
import requests
from dotenv import load_dotenv

# --- CONFIGURATION ---
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, '..'))

dotenv_path_backend = os.path.join(PROJECT_ROOT, 'backend', '.env')
load_dotenv(dotenv_path=dotenv_path_backend)

BASE_URL = os.getenv("ADSAPP_API_URL", "http://localhost:8000")
INTERNAL_API_SECRET = os.getenv("INTERNAL_API_SECRET")


def trigger_sweep():
    url = f"{BASE_URL}/internal/invitations/sweep-expired"
    headers = {"X-Internal-Secret": INTERNAL_API_SECRET}
    try:
        response = requests.post(url, headers=headers, timeout=30)
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        print(f"❌ Sweep rejected ({e.response.status_code}): {e.response.text}")
        sys.exit(1)
    except requests.exceptions.RequestException as e:
        print(f"❌ Could not reach {url}: {e}")
        sys.exit(1)
    return response.json()["expired"]


def main():
    if not INTERNAL_API_SECRET:
        print("❌ INTERNAL_API_SECRET not found in backend/.env file.")
        sys.exit(1)
    print(f"Triggering invitation sweep on {BASE_URL}...")
    expired = trigger_sweep()
    print(f"✅ Sweep complete. {expired} invitation(s) moved to expired.")


if __name__ == "__main__":
    main()
