TEST_API_KEY = "test-v0-key-not-real"
