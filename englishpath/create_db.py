# englishpath/create_db.py
from englishpath import create_app, db
from englishpath.models import Document  # noqa: F401  (registers the table)

app = create_app()

with app.app_context():
    print("🗑️ Dropping old tables...")
    db.drop_all()
    print("📦 Creating new tables...")
    db.create_all()
    print("✅ Database has been created/reset.")
