"""
Authentication Routes

POST /auth/register - Register new user (unverified, no token issued)
POST /auth/login - Login and get JWT token
GET /auth/verify-email?token= - Redeem the email verification token
POST /auth/resend-verification - Issue a fresh verification token
POST /auth/forgot-password - Email a password reset link
POST /auth/reset-password - Redeem the reset token and set a new password
GET /auth/me - Get current user info
PUT /auth/profile - Update own profile
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from careerguide.core.auth import (
    authenticate, create_access_token, generate_one_time_token, hash_password,
    is_expired, verify_password,
)
from careerguide.core.config import Settings, get_app_settings
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, DuplicateDocumentError, get_store
from careerguide.schemas.schemas import (
    EmailRequest, LoginRequest, ProfileUpdate, RegisterRequest, ResetPasswordRequest,
)
from careerguide.services.email_service import EmailService, get_email_service
from careerguide.utils.helpers import format_response, sanitize_user, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_app_settings),
):
    """
    Register a new user account.

    The account starts unverified; login is refused until the emailed
    verification link is used.
    """
    if await store.find_one(COLLECTIONS["users"], {"email": request.email}):
        raise APIError(400, "User with this email already exists. Please use a different email or login.")

    token, expires = generate_one_time_token(settings.verification_token_hours)
    now = utc_now_iso()
    user_data = {
        "email": request.email,
        "password": hash_password(request.password),
        "name": request.name,
        "role": request.role.value,
        "status": "active",
        "isVerified": False,
        "verificationToken": token,
        "verificationTokenExpires": expires,
        "verificationStatus": "verified" if request.role.value == "student" else "pending",
        "profileCompleted": False,
        "profile": {
            "phone": request.phone or "",
            "address": {"street": "", "city": request.location or "", "country": "Lesotho"},
            "bio": "",
            "avatar": "",
        },
        "createdAt": now,
        "updatedAt": now,
    }
    if request.role.value == "institution" and request.institution_name:
        user_data["institutionName"] = request.institution_name
    if request.role.value == "company" and request.company_name:
        user_data["companyName"] = request.company_name

    try:
        user = await store.create(COLLECTIONS["users"], user_data)
    except DuplicateDocumentError:
        raise APIError(400, "User with this email already exists. Please use a different email or login.")

    # Institutions get their own listing, pending admin approval
    if request.role.value == "institution":
        institution = await store.create(COLLECTIONS["institutions"], {
            "name": request.institution_name or request.name,
            "email": request.email,
            "location": request.location or "",
            "contactInfo": {"phone": request.phone or ""},
            "description": "",
            "adminId": user["id"],
            "status": "pending",
            "verificationStatus": "pending",
            "createdAt": now,
        })
        user = await store.update(COLLECTIONS["users"], user["id"], {"institutionId": institution["id"]})

    result = await email_service.send_verification_email(user, token)
    if not result["success"]:
        logger.warning("Verification email for %s not sent: %s", user["email"], result["message"])

    logger.info("Registered %s user %s", user["role"], user["email"])
    return format_response(
        True,
        "Registration successful! Please check your email to verify your account.",
        {"user": sanitize_user(user), "emailSent": result["success"]},
    )


@router.post("/login")
async def login(
    request: LoginRequest,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = await store.find_one(COLLECTIONS["users"], {"email": request.email})

    # Same message for unknown email and wrong password
    if not user or not verify_password(request.password, user.get("password", "")):
        logger.info("Failed login for %s", request.email)
        raise APIError(401, "Invalid email or password")

    if not user.get("isVerified"):
        raise APIError(
            401,
            "Please verify your email address before logging in.",
            needsVerification=True,
        )
    if user.get("status") == "suspended":
        raise APIError(401, "Your account is suspended. Please contact support.")
    if user.get("status") == "pending":
        raise APIError(401, "Your account is pending approval. Please wait for an administrator.")

    user = await store.update(COLLECTIONS["users"], user["id"], {"lastLogin": utc_now_iso()})
    token = create_access_token(data={"sub": user["id"], "role": user["role"]}, settings=settings)

    logger.info("Login successful for %s", user["email"])
    return format_response(True, "Login successful", {"token": token, "user": sanitize_user(user)})


@router.get("/verify-email")
async def verify_email(
    token: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
):
    """Mark the account verified. Tokens are single-use."""
    if not token:
        raise APIError(400, "Verification token is required")

    user = await store.find_one(COLLECTIONS["users"], {"verificationToken": token})
    if not user:
        raise APIError(400, "Invalid verification token")

    if is_expired(user.get("verificationTokenExpires")):
        raise APIError(400, "Verification token has expired. Please request a new one.")

    user = await store.update(COLLECTIONS["users"], user["id"], {
        "isVerified": True,
        "verificationToken": None,
        "verificationTokenExpires": None,
        "emailVerifiedAt": utc_now_iso(),
        "updatedAt": utc_now_iso(),
    })
    await email_service.send_welcome_email(user)

    logger.info("Email verified for %s", user["email"])
    return format_response(True, "Email verified successfully. You can now log in.", {"user": sanitize_user(user)})


@router.post("/resend-verification")
async def resend_verification(
    request: EmailRequest,
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_app_settings),
):
    user = await store.find_one(COLLECTIONS["users"], {"email": request.email})
    if not user:
        raise APIError(404, "User not found")
    if user.get("isVerified"):
        raise APIError(400, "Email is already verified")

    token, expires = generate_one_time_token(settings.verification_token_hours)
    user = await store.update(COLLECTIONS["users"], user["id"], {
        "verificationToken": token,
        "verificationTokenExpires": expires,
        "updatedAt": utc_now_iso(),
    })
    result = await email_service.send_verification_email(user, token)
    return format_response(True, "Verification email sent", {"emailSent": result["success"]})


@router.post("/forgot-password")
async def forgot_password(
    request: EmailRequest,
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_app_settings),
):
    """Always answers the same way so the endpoint can't be used to probe emails."""
    user = await store.find_one(COLLECTIONS["users"], {"email": request.email})
    if user:
        token, expires = generate_one_time_token(settings.reset_token_hours)
        user = await store.update(COLLECTIONS["users"], user["id"], {
            "resetPasswordToken": token,
            "resetPasswordExpires": expires,
            "updatedAt": utc_now_iso(),
        })
        await email_service.send_password_reset_email(user, token)
    else:
        logger.info("Password reset requested for unknown email %s", request.email)
    return format_response(True, FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password")
async def reset_password(request: ResetPasswordRequest, store: DocumentStore = Depends(get_store)):
    user = await store.find_one(COLLECTIONS["users"], {"resetPasswordToken": request.token})
    if not user:
        raise APIError(400, "Invalid reset token")
    if is_expired(user.get("resetPasswordExpires")):
        raise APIError(400, "Reset token has expired. Please request a new one.")

    await store.update(COLLECTIONS["users"], user["id"], {
        "password": hash_password(request.password),
        "resetPasswordToken": None,
        "resetPasswordExpires": None,
        "updatedAt": utc_now_iso(),
    })
    logger.info("Password reset for %s", user["email"])
    return format_response(True, "Password has been reset. You can now log in.")


@router.get("/me")
async def get_me(user: dict = Depends(authenticate)):
    """Get current authenticated user info."""
    return format_response(True, "User retrieved successfully", sanitize_user(user))


@router.put("/profile")
async def update_profile(
    request: ProfileUpdate,
    user: dict = Depends(authenticate),
    store: DocumentStore = Depends(get_store),
):
    """Update name, nested profile fields and student matching fields."""
    fields = request.model_dump(exclude_unset=True)
    changes = {"updatedAt": utc_now_iso()}

    if fields.get("name"):
        changes["name"] = fields["name"].strip()

    profile = dict(user.get("profile") or {})
    for key in ("phone", "bio", "avatar"):
        if key in fields:
            profile[key] = fields[key]
    if fields.get("address") is not None:
        profile["address"] = {**(profile.get("address") or {}), **{
            k: v for k, v in fields["address"].items() if v is not None
        }}
    changes["profile"] = profile

    for key, stored in (("skills", "skills"), ("course", "course"),
                        ("experience", "experience"), ("preferred_location", "preferredLocation")):
        if key in fields:
            changes[stored] = fields[key]

    changes["profileCompleted"] = bool(profile.get("phone") and profile.get("bio"))
    updated = await store.update(COLLECTIONS["users"], user["id"], changes)
    return format_response(True, "Profile updated successfully", sanitize_user(updated))
