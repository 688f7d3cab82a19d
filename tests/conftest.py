from __future__ import annotations

import os

# Settings() is built at import time; routers pull it in.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("PUBLIC_APP_URL", "https://cookbooks.test")
