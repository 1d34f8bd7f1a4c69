PASSPHRASE = "secret123"
WRONG_PASSPHRASE = "wrong"

HOST = "example.com"
USERNAME = "user"
HOME = "/home/user"
