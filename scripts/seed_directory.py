"""
Seed the role ladder, the Human Resources department and the initial Super Admin,
plus any extra departments named on the command line. Existing rows are left
unchanged. Run from the repository root with .env loaded.

Usage:
  python scripts/seed_directory.py                          # roles, HR, Super Admin
  python scripts/seed_directory.py Engineering Marketing   # ...and these departments
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.models.department import Department


def main():
    names = [name.strip() for name in sys.argv[1:] if name.strip()]

    db = SessionLocal()
    try:
        init_db(db)
        for name in names:
            if db.query(Department).filter(Department.name == name).first():
                print(f"Department exists: {name}")
                continue
            db.add(Department(name=name, active=True))
            print(f"Department created: {name}")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    main()
