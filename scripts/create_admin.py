"""Promote or create an admin user.

Run from the repository root as ``python -m scripts.create_admin <email>
<username> <password>``, or use the ``blog-create-admin`` console script.
"""
from app.bootstrap import run

if __name__ == "__main__":
    run()
