import pytest
import sys
import os
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Make the project root importable when pytest runs from elsewhere
root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if root_dir not in sys.path:
    sys.path.insert(0, root_dir)

from hr_eval.db import Base, get_db
from hr_eval.main import app
from hr_eval.models.submission import EvaluationSubmission

# Setup test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

EMPLOYEE_SIGNATURE = "data:image/png;base64,AAA"
EVALUATOR_SIGNATURE = "data:image/png;base64,BBB"

CATEGORY_FIELDS = {
    "jobKnowledgeScore": 3,
    "qualityOfWorkScore": 5,
    "adaptabilityScore": 3,
    "teamworkScore": 3,
    "reliabilityScore": 4,
    "ethicalScore": 4,
    "customerServiceScore": 5,
}

def make_scores(**values):
    """evaluationData with every field of a category set to the given score, 5 by default."""
    data = {}
    for prefix, count in CATEGORY_FIELDS.items():
        value = values.get(prefix.replace("Score", ""), 5)
        for i in range(1, count + 1):
            data[f"{prefix}{i}"] = value
    return data

@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def client(db):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}

@pytest.fixture
def create_submission(db):
    def _create_submission(employee_name="Test Employee", **fields):
        submission = EvaluationSubmission(employee_name=employee_name, **fields)
        db.add(submission)
        db.commit()
        db.refresh(submission)
        return submission
    return _create_submission
