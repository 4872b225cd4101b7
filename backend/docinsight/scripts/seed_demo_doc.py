import asyncio
from docinsight.db import SessionLocal, engine, Base
from docinsight.services.documents import upload_document
from docinsight.services.pipeline import process_document
from docinsight.services.storage import LocalBlobStore

DEMO_TEXT = b"""Master Services Agreement

This agreement is made between Acme Holdings and Jane Porter (jane.porter@acme.example).
The client will pay $12,500.00 per quarter. Either party may terminate with 30 days notice.
Liability is capped at fifty percent of annual fees. Renewal is automatic unless notice is given.
"""

def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        doc = upload_document(db, LocalBlobStore(), DEMO_TEXT, "demo-msa.txt", "text/plain", "demo-user")
        asyncio.run(process_document(db, doc.id, DEMO_TEXT, doc.file_type))
        print(doc.id)
    finally:
        db.close()

if __name__ == "__main__":
    main()
