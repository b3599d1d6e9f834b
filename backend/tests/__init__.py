"""
RevEd Kids Learning Core Test Suite

Test Structure:
    tests/
    ├── conftest.py                      # Shared fixtures (env, mocks, SQLite)
    └── unit/
        ├── test_sm2.py                  # Pure SM-2 scheduling math
        ├── test_revision_scheduler.py   # Schedule persistence and due queries
        ├── test_attempt_service.py      # Attempt recording and status rules
        ├── test_recommendation_service.py  # Candidate selection, scoring, cache
        ├── test_progress_service.py     # Profiles and progress listing
        ├── test_students_api.py         # HTTP layer (auth, validation, envelope)
        ├── test_error_handling.py       # Error hierarchy and rendering
        ├── test_redis.py                # Redis cache and session store (mocked)
        └── test_config.py               # Settings and YAML config

Running Tests:
    # From the repository root
    pip install -e ".[test]"
    pytest -v
"""
