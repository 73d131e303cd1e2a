"""
Services module - business logic behind the routes.

- email_service: SMTP account and application emails
- notification_service: in-app notifications
- admission_service: application limits, qualification, admissions
- job_service: job postings and job applications
- matching_service: job recommendations
- report_service: system and institution reports
"""
