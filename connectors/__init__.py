"""
connectors — adapters to Google services used by the auth flows.

  • ``GoogleIdentityVerifier``: Google Sign-In ID token verification
  • ``GmailSender``: password reset email via the Gmail API
"""
