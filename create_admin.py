"""
Create a back-office admin.

Usage:
    python create_admin.py <username> <email> <password>
"""
import sys

from app.database import SessionLocal
from app.models.admin import Admin
from app.auth.security import hash_password

if len(sys.argv) != 4:
    print(__doc__)
    sys.exit(1)

username, email, password = sys.argv[1:]

db = SessionLocal()
if db.query(Admin).filter(Admin.username == username).first():
    print(f'Admin {username} already exists')
    db.close()
    sys.exit(1)

admin = Admin(username=username, email=email, password_hash=hash_password(password))
db.add(admin)
db.commit()
print(f'Admin created: id={admin.id}')
db.close()
