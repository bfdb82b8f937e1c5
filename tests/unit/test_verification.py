from utils.verification import as_utc, generate_verification_code, get_code_expiry_time, is_expired
from datetime import datetime, timedelta, timezone

def test_generate_verification_code():
    code = generate_verification_code()
    assert len(code) == 6
    assert code.isdigit()
    assert not code.startswith("0")

def test_code_expiry_time():
    expiry = get_code_expiry_time(minutes=10)
    now = datetime.now(timezone.utc)
    assert expiry > now
    assert expiry < now + timedelta(minutes=11)

def test_is_expired():
    now = datetime.now(timezone.utc)
    assert is_expired(None) is True
    assert is_expired(now - timedelta(seconds=1)) is True
    assert is_expired(now + timedelta(minutes=1)) is False

def test_naive_datetimes_are_treated_as_utc():
    naive = datetime(2024, 5, 1, 12, 0)
    assert as_utc(naive) == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert is_expired(naive, now=datetime(2024, 5, 1, 11, 59, tzinfo=timezone.utc)) is False
