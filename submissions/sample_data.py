import logging

logger = logging.getLogger(__name__)

# Sample submissions shown by the in-memory backend
SAMPLE_SUBMISSIONS = [
    {"name": "Jean Dupont", "email": "jean.dupont@example.com", "message": "Bonjour, j'aimerais en savoir plus sur vos services."},
    {"name": "Amina Diallo", "email": "amina.diallo@example.com", "message": "Thanks for the quick reply last week, everything works now."},
    {"name": "Carlos Mendes", "email": "carlos.mendes@example.com", "message": "Could you send me the pricing details for the team plan?"},
]

def seed_sample_submissions(repository):
    """
    Fill an empty repository with sample submissions for development purposes.
    Repositories that already hold submissions are left untouched.
    """
    existing = len(repository.list_all())
    if existing > 0:
        logger.info(f"Repository already has {existing} submissions, skipping sample data creation")
        return

    for sample in SAMPLE_SUBMISSIONS:
        repository.create(sample["name"], sample["email"], sample["message"], None)

    logger.info(f"Successfully created {len(SAMPLE_SUBMISSIONS)} sample submissions")
