from datetime import timedelta

# DEV ONLY: hardcoded secret. Later we will load from env vars.
SECRET_KEY = "change-me-in-production"
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(minutes=60)

# Cohort policy
ACTIVE_ENROLLMENT_STATUSES = ("enrolled", "completed")
REQUIRE_STAFF_SCOPE = False  # when True, mentors/admins must pass course_offering_id

# Rollup batching / fan-out
PROGRESS_BATCH_SIZE = 500  # max ids per IN (...) clause
ROLLUP_MAX_WORKERS = 8
ROLLUP_MIN_MODULES_FOR_FANOUT = 2  # below this, compute inline

# Todos paging
TODOS_DEFAULT_LIMIT = 10
TODOS_MAX_LIMIT = 100

# How often long-running routes check whether the client went away
DISCONNECT_POLL_SECONDS = 0.1
