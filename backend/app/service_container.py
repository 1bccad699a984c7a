from __future__ import annotations

from app.services.course_service import CourseService
from app.services.lesson_service import LessonService
from app.services.payment_intent_service import PaymentIntentService
from app.services.profile_service import ProfileService
from app.services.progress_service import ProgressService
from app.services.quiz_service import QuizService
from app.services.razorpay_gateway import RazorpayGateway
from app.services.reconciliation_service import ReconciliationService
from app.services.service_factory import IdentityProvider, get_cognito_service
from app.services.signature_verifier import HmacSignatureVerifier
from app.services.storage_service import StorageService
from app.services.token_verifier import TokenVerifier
from common.core.config_service import ConfigService, config_service
from common.core.lifecycle import Lifecycle
from common.utils.utils import cached_classmethod, get_logger
from shared_db.crud.course import CourseDAO
from shared_db.crud.enrollment import EnrollmentDAO
from shared_db.crud.lesson import LessonDAO
from shared_db.crud.payments import PaymentDAO
from shared_db.crud.profile import ProfileDAO
from shared_db.crud.progress import ProgressDAO
from shared_db.crud.quiz import QuizDAO

logger = get_logger()


class Services(Lifecycle):
    """Process-wide providers, DAOs and services. SDK clients are created lazily on first use."""

    config_service: ConfigService

    profile_dao: ProfileDAO
    course_dao: CourseDAO
    lesson_dao: LessonDAO
    quiz_dao: QuizDAO
    progress_dao: ProgressDAO
    payment_dao: PaymentDAO
    enrollment_dao: EnrollmentDAO

    identity_provider: IdentityProvider
    payment_gateway: RazorpayGateway
    storage_service: StorageService

    token_verifier: TokenVerifier
    profile_service: ProfileService
    course_service: CourseService
    lesson_service: LessonService
    quiz_service: QuizService
    progress_service: ProgressService
    payment_intent_service: PaymentIntentService
    reconciliation_service: ReconciliationService

    def __init__(self) -> None:
        super().__init__()

        self.config_service = self._create_config_service()

        # Initialize database access objects
        self.profile_dao = ProfileDAO()
        self.course_dao = CourseDAO()
        self.lesson_dao = LessonDAO()
        self.quiz_dao = QuizDAO()
        self.progress_dao = ProgressDAO()
        self.payment_dao = PaymentDAO()
        self.enrollment_dao = EnrollmentDAO()

        # Initialize external providers
        self.identity_provider = self._create_identity_provider(config_service=self.config_service)
        self.payment_gateway = self._create_payment_gateway(config_service=self.config_service)
        self.storage_service = self._create_storage_service(config_service=self.config_service)

        # Initialize domain services
        self.token_verifier = TokenVerifier(self.identity_provider, timeout_seconds=self.config_service.timeouts.identity_seconds)
        self.profile_service = ProfileService(self.profile_dao, self.identity_provider)
        self.course_service = CourseService(self.course_dao, self.lesson_dao)
        self.lesson_service = LessonService(self.lesson_dao, self.course_dao, self.enrollment_dao, self.storage_service)
        self.quiz_service = QuizService(self.quiz_dao)
        self.progress_service = ProgressService(self.progress_dao, self.lesson_dao)
        self.payment_intent_service = PaymentIntentService(self.course_dao, self.payment_dao, self.payment_gateway)
        self.reconciliation_service = self._create_reconciliation_service(config_service=self.config_service)

    async def _start(self) -> None:
        payments = self.config_service.payments
        if not payments.is_configured():
            logger.warning("Payment provider keys are missing; checkout and verification will fail", provider=payments.provider)
        if not payments.webhook_secret:
            logger.warning("Payment webhook secret is missing; every webhook will be rejected", provider=payments.provider)
        if not self.config_service.storage.bucket:
            logger.warning("Storage bucket is not configured; lesson streaming will fail")

    # Protected creation methods for dependency injection/overriding
    def _create_config_service(self) -> ConfigService:
        return config_service

    def _create_identity_provider(self, config_service: ConfigService) -> IdentityProvider:
        return get_cognito_service(config_service)

    def _create_payment_gateway(self, config_service: ConfigService) -> RazorpayGateway:
        return RazorpayGateway(config_service)

    def _create_storage_service(self, config_service: ConfigService) -> StorageService:
        return StorageService(config_service)

    def _create_reconciliation_service(self, config_service: ConfigService) -> ReconciliationService:
        return ReconciliationService(
            self.payment_dao,
            self.enrollment_dao,
            checkout_verifier=HmacSignatureVerifier(config_service.payments.key_secret, name="checkout"),
            webhook_verifier=HmacSignatureVerifier(config_service.payments.webhook_secret, name="webhook"),
        )

    @cached_classmethod
    def instance(cls) -> Services:
        return Services()
