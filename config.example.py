# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets (EmailJS keys). Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "RMS_APP_NAME": "App display name (default: rms-reminders).",
    "RMS_LOG_LEVEL": "Console logging level (default: INFO).",
    "RMS_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Paths (gitignored)
    "RMS_DATA_DIR": "Local data directory (default: .local/rms).",
    "RMS_STATE_PATH": "Reminder state JSON (default: <data_dir>/reminder_state.json).",
    "RMS_DATA_PATH": "Tasks/projects/users snapshot JSON (default: <data_dir>/rms_data.json).",
    # Scan cycle
    "RMS_SCAN_INTERVAL_SECONDS": "Seconds between scan cycles (default: 300).",
    "RMS_INITIAL_DELAY_SECONDS": "Delay before the first scan after startup (default: 10).",
    "RMS_UPCOMING_WINDOW_DAYS": "Lookahead for upcoming deadlines, in days (default: 3).",
    "RMS_SENT_RETENTION_DAYS": "Days an alert stays in the sent log (default: 7).",
    "RMS_DISMISSED_RETENTION_DAYS": "Days a dismissal is kept; 0 keeps it forever (default: 0).",
    # EmailJS (leave empty to only log notifications)
    "RMS_EMAILJS_SERVICE_ID": "EmailJS service id.",
    "RMS_EMAILJS_TEMPLATE_ID": "EmailJS template id.",
    "RMS_EMAILJS_PUBLIC_KEY": "EmailJS public key (user_id).",
    "RMS_EMAILJS_PRIVATE_KEY": "Optional EmailJS private key (accessToken).",
    "RMS_EMAILJS_API_URL": "EmailJS endpoint (default: https://api.emailjs.com/api/v1.0/email/send).",
    "RMS_EMAIL_FROM_NAME": "Sender display name (default: RMS Notification System).",
    "RMS_HTTP_TIMEOUT_SECONDS": "HTTP timeout for EmailJS calls (default: 10).",
    # SMS
    "RMS_SMS_DEFAULT_CARRIER": "Carrier used when a user has none set (default: verizon).",
}
