"""
Diagnostic script to check .env loading and photo storage configuration.
Run this to troubleshoot start-up problems before launching the server.
"""

import os
import sys
from io import BytesIO
from pathlib import Path

from dotenv import load_dotenv
import PIL
from PIL import Image, features

from profile_photo.config import PhotoSettings

print("\n" + "="*70)
print("🔍 ENVIRONMENT DIAGNOSTICS")
print("="*70 + "\n")

# 1. Check Python version
print(f"1. Python Version: {sys.version}")
print()

# 2. Check .env file
env_path = Path(__file__).parent / ".env"
print(f"2. .env File Location: {env_path}")
print(f"   Exists: {env_path.exists()}")
if env_path.exists():
    result = load_dotenv(dotenv_path=env_path, override=True)
    print(f"   Loaded: {result}")
print()

# 3. Check settings
print("3. Photo Settings:")
issues = []
try:
    settings = PhotoSettings.from_env()
except ValueError as e:
    settings = None
    print(f"   ✗ Invalid configuration: {e}")
    issues.append(f"❌ Invalid configuration: {e}")
else:
    for name in ("PHOTO_STORAGE_ROOT", "PHOTO_RELATIVE_DIR", "PHOTO_TARGET_HEIGHT",
                 "PHOTO_MAX_RATIO", "PHOTO_TARGET_MAX_BYTES", "PHOTO_MAX_UPLOAD_BYTES"):
        source = "env" if name in os.environ else "default"
        print(f"   {name}: {getattr(settings, name[len('PHOTO_'):].lower())} ({source})")
print()

# 4. Check storage root
print("4. Storage Root:")
if settings is not None:
    root = settings.storage_root.resolve()
    print(f"   Path: {root}")
    probe = root
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    if os.access(probe, os.W_OK):
        print(f"   ✓ Writable (checked at {probe})")
    else:
        print(f"   ✗ Not writable (checked at {probe})")
        issues.append(f"❌ Storage root {root} is not writable")
print()

# 5. Check Pillow codecs
print("5. Pillow Codecs:")
print(f"   Pillow version: {PIL.__version__}")
if features.check("jpg"):
    buf = BytesIO()
    Image.new("RGB", (8, 8), "white").save(buf, format="JPEG", quality=80)
    print(f"   ✓ JPEG encoder available ({len(buf.getvalue())} byte probe)")
else:
    print("   ✗ JPEG support missing")
    issues.append("❌ Pillow was built without JPEG support")
for codec in ("webp", "zlib"):
    print(f"   {codec}: {'✓' if features.check(codec) else '✗'}")
print()

# 6. Summary
print("="*70)
print("📋 SUMMARY")
print("="*70)

if not issues:
    print("✅ All checks passed! Configuration looks good.")
    print("\nYou can now start the server:")
    print("  pip install -e .[server]")
    print("  uvicorn profile_photo.main:app --reload")
else:
    print("Issues found:\n")
    for issue in issues:
        print(f"  {issue}")

print("="*70 + "\n")
