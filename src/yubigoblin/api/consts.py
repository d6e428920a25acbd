API_PREFIX = "/api/v1"
DEPENDENCY_URL = "/dependencies"
YUBI_KEY_URL = "/yubikey"
USERS_URL = "/users"
CHECK_YUBI_KEY_FOR_USER = "/yubikey/{username}/check"
REMOVE_YUBI_KEY_FOR_USER = "/yubikey/{username}"
