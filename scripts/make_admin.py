"""Promote an account to administrator and approve it.

Usage: python scripts/make_admin.py someone@example.com [password]
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash
from gallery import create_app
from gallery.extensions import db
from gallery.models import User

if len(sys.argv) < 2:
    sys.exit(__doc__)

email = sys.argv[1].strip().lower()
password = sys.argv[2] if len(sys.argv) > 2 else None

app = create_app()

with app.app_context():
    user = User.query.filter_by(email=email).first()

    if not user:
        if not password:
            sys.exit(f"No account for {email}; pass a password to create one")
        user = User(
            email=email,
            password_hash=generate_password_hash(password, method='pbkdf2:sha256'),
        )
        db.session.add(user)
        print("New admin account created")
    else:
        print("Existing account promoted to admin")

    user.is_admin = True
    user.blocked = False
    db.session.commit()
