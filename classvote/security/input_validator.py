# classvote/security/input_validator.py

import re
import html
import bleach

from classvote.errors import ValidationError

# Input validation and sanitization for registration and ballot payloads


class InputValidator:
    def __init__(self):
        self.allowed_html_tags = []
        self.allowed_html_attributes = {}
        self.max_reason_length = 64

        self.patterns = {
            'email': re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'),
            'class_label': re.compile(r'^[\w][\w .\-/]{0,31}$', re.UNICODE),
            'xss_script': re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL),
            'xss_event': re.compile(r'\bon\w+\s*=', re.IGNORECASE)
        }

    def sanitize_string(self, input_str, max_length=255):
        if not isinstance(input_str, str):
            raise ValidationError("Input must be a string")
        if len(input_str) > max_length:
            input_str = input_str[:max_length]

        sanitized = re.sub(self.patterns['xss_script'], '', input_str)
        sanitized = re.sub(self.patterns['xss_event'], '', sanitized)
        sanitized = bleach.clean(sanitized, tags=self.allowed_html_tags,
                                 attributes=self.allowed_html_attributes, strip=True)
        # bleach escapes what it keeps; stored values are plain text
        return html.unescape(sanitized).strip()

    def validate_email(self, email):
        return isinstance(email, str) and bool(self.patterns['email'].match(email.strip()))

    def validate_class_label(self, class_label):
        return isinstance(class_label, str) and bool(self.patterns['class_label'].match(class_label.strip()))

    def require_email(self, email):
        if not email:
            raise ValidationError("Email is required")
        if not self.validate_email(email):
            raise ValidationError("Invalid email address")
        return email.strip()

    def require_token(self, token):
        if not isinstance(token, str) or not token.strip():
            raise ValidationError("Token is required")
        return token.strip()

    def normalize_registration(self, full_name, class_label):
        if not full_name or not class_label:
            raise ValidationError("Missing required fields")
        name = self.sanitize_string(full_name, max_length=100)
        if not name:
            raise ValidationError("Invalid full name")
        if not self.validate_class_label(class_label):
            raise ValidationError("Invalid class label")
        return name, class_label.strip()

    def normalize_ballot(self, first_choice, first_reason, second_choice, second_reason):
        fields = {
            'firstChoice': first_choice,
            'firstReason': first_reason,
            'secondChoice': second_choice,
            'secondReason': second_reason,
        }
        for field, value in fields.items():
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Missing required vote field: {field}")
        first_choice = first_choice.strip()
        second_choice = second_choice.strip()
        if first_choice == second_choice:
            raise ValidationError("First and second choice must be different candidates")
        # Reason codes are opaque and stored exactly as given
        for field, reason in (("firstReason", first_reason), ("secondReason", second_reason)):
            if len(reason) > self.max_reason_length:
                raise ValidationError(f"Reason code too long: {field}")
        return first_choice, first_reason, second_choice, second_reason
