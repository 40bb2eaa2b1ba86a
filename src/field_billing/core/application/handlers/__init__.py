from .assignment_handlers import ( # noqa
  AssignCollectorToClientsHandler,
  AssignCollectorToStoreHandler,
  RefreshCollectionDataHandler,
  RemoveCollectorFromClientsHandler,
  RemoveCollectorFromStoreHandler,
)
from .payment_handlers import ( # noqa
  CorrectInstallmentHandler,
  EditSaleReceivedTotalHandler,
  ProcessGeneralPaymentHandler,
  ProcessSalePaymentHandler,
)
from .visit_handlers import ( # noqa
  AddVisitNoteHandler,
  ApproveVisitCancellationHandler,
  RejectVisitCancellationHandler,
  RequestVisitCancellationHandler,
  RescheduleVisitHandler,
  ScheduleVisitsHandler,
  UpdateVisitStatusHandler,
)
