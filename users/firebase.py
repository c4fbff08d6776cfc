import firebase_admin
from firebase_admin import auth, credentials, exceptions
from django.conf import settings
import os
import logging

logger = logging.getLogger(__name__)


def initialize_firebase():
    """Initialize Firebase Admin SDK with service account"""
    if firebase_admin._apps:
        return True
    try:
        # Method 1: credentials from environment variables (production)
        if all(key in os.environ for key in [
            'FIREBASE_PROJECT_ID', 'FIREBASE_PRIVATE_KEY', 'FIREBASE_CLIENT_EMAIL'
        ]):
            logger.info("Using Firebase credentials from environment variables")
            firebase_creds = {
                "type": "service_account",
                "project_id": os.environ.get('FIREBASE_PROJECT_ID'),
                "private_key_id": os.environ.get('FIREBASE_PRIVATE_KEY_ID', ''),
                "private_key": os.environ.get('FIREBASE_PRIVATE_KEY').replace('\\n', '\n'),
                "client_email": os.environ.get('FIREBASE_CLIENT_EMAIL'),
                "client_id": os.environ.get('FIREBASE_CLIENT_ID', ''),
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
                "client_x509_cert_url": os.environ.get('FIREBASE_CLIENT_CERT_URL', ''),
            }
            firebase_admin.initialize_app(credentials.Certificate(firebase_creds))
            logger.info("Firebase Admin SDK initialized from environment")
            return True

        # Method 2: service account file (development)
        cred_path = getattr(settings, 'FIREBASE_SERVICE_ACCOUNT_PATH', None)
        if not cred_path:
            cred_path = os.path.join(settings.BASE_DIR, 'firebase-service-account.json')

        if os.path.exists(cred_path):
            firebase_admin.initialize_app(credentials.Certificate(cred_path))
            logger.info(f"Firebase Admin SDK initialized from {cred_path}")
            return True

        logger.warning("Firebase service account credentials not found. End-user authentication will not work.")
        logger.warning("Set FIREBASE_SERVICE_ACCOUNT_PATH or FIREBASE_PROJECT_ID, FIREBASE_PRIVATE_KEY, FIREBASE_CLIENT_EMAIL")
    except Exception as e:
        logger.error(f"Failed to initialize Firebase Admin SDK: {e}")
    return False


def serialize_firebase_user(user_record):
    return {
        'uid': user_record.uid,
        'email': user_record.email,
        'display_name': user_record.display_name or user_record.email or '',
        'photo_url': user_record.photo_url or None,
        'disabled': user_record.disabled,
    }


def get_firebase_user(uid):
    """
    Look up a user in Firebase Authentication.

    Returns a plain dict, or None when the user does not exist or Firebase
    cannot be reached.
    """
    try:
        return serialize_firebase_user(auth.get_user(uid))
    except auth.UserNotFoundError:
        return None
    except (ValueError, exceptions.FirebaseError) as e:
        logger.error(f"Error fetching user {uid} from Firebase: {e}")
        return None
