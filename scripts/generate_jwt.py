import argparse
import datetime
from jose import jwt

"""
CLI utility to generate a JWT for testing SHIFT Portal API endpoints.
Requires the JWT secret to be provided on the command line.

Example usage:
    python generate_jwt.py --secret 'your-actual-secret' --user-id k3m9x7q2w5 --role ADMIN --email staff@shift.example --seconds 600
"""

def main():
    parser = argparse.ArgumentParser(description="Generate a test JWT.")
    parser.add_argument("--secret", required=True, help="JWT secret key")
    parser.add_argument("--user-id", required=True, help="Profile public_id, or the email for PRE_SIGNUP tokens (sub claim)")
    parser.add_argument("--role", required=True, choices=["USER", "ADMIN", "PRE_SIGNUP"], help="User role")
    parser.add_argument("--email", required=True, help="Email claim")
    parser.add_argument("--full-name", default=None, help="Full name claim (PRE_SIGNUP tokens)")
    parser.add_argument("--seconds", type=int, default=3600, help="Token expiry in seconds (default: 3600, i.e. 1 hour)")
    args = parser.parse_args()

    payload = {
        "sub": args.user_id,
        "role": args.role,
        "email": args.email,
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(seconds=args.seconds)
    }
    if args.full_name:
        payload["full_name"] = args.full_name
    print(payload)
    token = jwt.encode(payload, args.secret, algorithm="HS256")
    print("----------------------------------------------------------\n")
    print(token)

if __name__ == "__main__":
    main()
