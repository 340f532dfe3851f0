"""
Example survey schemas.

Hand-written implementations of the Survey capability for a small order
form and a preferences screen. They cover every question kind:

    Address         nested struct                  (AllOf)
    PaymentMethod   enum with data per variant     (OneOf)
    Feature         multi-select enum              (AnyOf)
    Contact         top-level enum                 (OneOf at the root path)
    OrderForm       struct using all of the above, plus an optional field
    Preferences     numeric bounds, lists, AnyOf
    Account         masked/multiline input, field and composite validators
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from elicit.definition import SurveyDefinition
from elicit.path import POSITIONAL_KEY, SELECTED_VARIANT_KEY, ResponsePath
from elicit.question import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    FloatQuestion,
    InputQuestion,
    IntQuestion,
    ListElementKind,
    ListQuestion,
    MaskedQuestion,
    MultilineQuestion,
    OneOfQuestion,
    Question,
    Variant,
)
from elicit.responses import Responses
from elicit.survey import Survey, embed, nested, read_any_of, read_one_of, write_any_of, write_one_of
from elicit.values import ResponseValue

P = ResponsePath.root
POSITIONAL = P(POSITIONAL_KEY)


# =============================================================================
# Address (nested struct)
# =============================================================================


@dataclass
class Address(Survey):
    street: str
    city: str
    zip: str

    @classmethod
    def survey(cls) -> SurveyDefinition:
        return SurveyDefinition(
            questions=[
                Question(P("street"), "Street address:", InputQuestion()),
                Question(P("city"), "City:", InputQuestion()),
                Question(P("zip"), "Zip code:", InputQuestion()),
            ]
        )

    @classmethod
    def from_responses(cls, responses: Responses) -> "Address":
        return cls(
            street=responses.get_text(P("street")),
            city=responses.get_text(P("city")),
            zip=responses.get_text(P("zip")),
        )

    def to_responses(self) -> Responses:
        r = Responses()
        r.insert(P("street"), self.street)
        r.insert(P("city"), self.city)
        r.insert(P("zip"), self.zip)
        return r


# =============================================================================
# PaymentMethod (OneOf)
# =============================================================================


@dataclass
class Cash:
    pass


@dataclass
class CreditCard:
    number: str
    cvv: str


@dataclass
class BankTransfer:
    iban: str


PaymentMethod = Union[Cash, CreditCard, BankTransfer]


def payment_variants() -> List[Variant]:
    return [
        Variant.unit("Cash"),
        Variant(
            "Credit card",
            AllOfQuestion(
                questions=[
                    Question(P("number"), "Card number:", InputQuestion()),
                    Question(P("cvv"), "CVV:", MaskedQuestion()),
                ]
            ),
        ),
        Variant("Bank transfer", AllOfQuestion(questions=[Question(P("iban"), "IBAN:", InputQuestion())])),
    ]


def payment_from_responses(responses: Responses, path: ResponsePath) -> PaymentMethod:
    index, data = read_one_of(responses, path)
    if index == 0:
        return Cash()
    if index == 1:
        return CreditCard(number=data.get_text(P("number")), cvv=data.get_text(P("cvv")))
    if index == 2:
        return BankTransfer(iban=data.get_text(P("iban")))
    raise ValueError(f"Unknown payment variant {index}")


def payment_to_responses(payment: PaymentMethod, responses: Responses, path: ResponsePath) -> None:
    data = Responses()
    if isinstance(payment, Cash):
        index = 0
    elif isinstance(payment, CreditCard):
        index = 1
        data.insert(P("number"), payment.number)
        data.insert(P("cvv"), payment.cvv)
    else:
        index = 2
        data.insert(P("iban"), payment.iban)
    write_one_of(responses, path, index, data)


# =============================================================================
# Feature (AnyOf)
# =============================================================================


@dataclass
class DarkMode:
    pass


@dataclass
class Notifications:
    email: bool
    push: bool


@dataclass
class CustomTheme:
    name: str


Feature = Union[DarkMode, Notifications, CustomTheme]


def feature_variants() -> List[Variant]:
    return [
        Variant.unit("Dark mode"),
        Variant(
            "Notifications",
            AllOfQuestion(
                questions=[
                    Question(P("email"), "Email notifications?", ConfirmQuestion()),
                    Question(P("push"), "Push notifications?", ConfirmQuestion()),
                ]
            ),
        ),
        Variant("Custom theme", InputQuestion()),
    ]


def feature_from_responses(index: int, data: Responses) -> Feature:
    if index == 0:
        return DarkMode()
    if index == 1:
        return Notifications(email=data.get_bool(P("email")), push=data.get_bool(P("push")))
    if index == 2:
        return CustomTheme(name=data.get_text(POSITIONAL))
    raise ValueError(f"Unknown feature variant {index}")


def feature_to_responses(feature: Feature) -> Tuple[int, Optional[Responses]]:
    if isinstance(feature, DarkMode):
        return 0, None
    data = Responses()
    if isinstance(feature, Notifications):
        data.insert(P("email"), feature.email)
        data.insert(P("push"), feature.push)
        return 1, data
    data.insert(POSITIONAL, feature.name)
    return 2, data


# =============================================================================
# Contact (top-level enum)
# =============================================================================


@dataclass
class Contact(Survey):
    """
    A schema that is itself an enum: its OneOf question sits at the empty
    path, so the selection is stored at the root "selected_variant".

    kind: "email", "phone" or "none"; value: the address or number.
    """

    kind: str
    value: Optional[str] = None

    KINDS = ("email", "phone", "none")

    @classmethod
    def survey(cls) -> SurveyDefinition:
        return SurveyDefinition(
            questions=[
                Question(
                    ResponsePath.empty(),
                    "How should we contact you?",
                    OneOfQuestion(
                        variants=[
                            Variant("Email", InputQuestion()),
                            Variant("Phone", InputQuestion()),
                            Variant.unit("Do not contact me"),
                        ]
                    ),
                )
            ]
        )

    @classmethod
    def from_responses(cls, responses: Responses) -> "Contact":
        index, data = read_one_of(responses, ResponsePath.empty())
        if index == 2:
            return cls(kind="none")
        return cls(kind=cls.KINDS[index], value=data.get_text(POSITIONAL))

    def to_responses(self) -> Responses:
        r = Responses()
        index = self.KINDS.index(self.kind)
        data = None
        if index != 2:
            data = Responses()
            data.insert(POSITIONAL, self.value or "")
        write_one_of(r, ResponsePath.empty(), index, data)
        return r

    @classmethod
    def validate_field(cls, path: ResponsePath, responses: Responses) -> Optional[str]:
        if path == POSITIONAL and responses.get_chosen_variant(P(SELECTED_VARIANT_KEY)) == 0:
            if "@" not in responses.get_text(path):
                return "Enter a valid email address"
        return super().validate_field(path, responses)


# =============================================================================
# OrderForm
# =============================================================================


@dataclass
class OrderForm(Survey):
    customer_name: str
    shipping_address: Address
    payment: PaymentMethod
    nickname: Optional[str] = None

    @classmethod
    def survey(cls) -> SurveyDefinition:
        return SurveyDefinition(
            prelude="Let's place your order.",
            questions=[
                Question(P("customer_name"), "Customer name:", InputQuestion()),
                Question(P("shipping_address"), "Shipping address:", AllOfQuestion(Address.survey().questions)),
                Question(P("payment"), "Payment method:", OneOfQuestion(variants=payment_variants())),
                Question(P("nickname"), "Nickname (optional):", InputQuestion(default="")),
            ],
            epilogue="Thank you for your order.",
        )

    @classmethod
    def from_responses(cls, responses: Responses) -> "OrderForm":
        nickname = responses.get_text(P("nickname")) if responses.has_value(P("nickname")) else None
        return cls(
            customer_name=responses.get_text(P("customer_name")),
            shipping_address=Address.from_responses(nested(responses, P("shipping_address"))),
            payment=payment_from_responses(responses, P("payment")),
            nickname=nickname,
        )

    def to_responses(self) -> Responses:
        r = Responses()
        r.insert(P("customer_name"), self.customer_name)
        embed(r, P("shipping_address"), self.shipping_address.to_responses())
        payment_to_responses(self.payment, r, P("payment"))
        r.insert(P("nickname"), self.nickname or "")
        return r


# =============================================================================
# Preferences
# =============================================================================


@dataclass
class Preferences(Survey):
    username: str
    age: int
    height: float
    features: List[Feature] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @classmethod
    def survey(cls) -> SurveyDefinition:
        return SurveyDefinition(
            questions=[
                Question(P("username"), "Username:", InputQuestion()),
                Question(P("age"), "Age:", IntQuestion(min=0, max=150)),
                Question(P("height"), "Height in metres:", FloatQuestion(min=0.5, max=2.5)),
                Question(P("features"), "Enable features:", AnyOfQuestion(variants=feature_variants())),
                Question(P("tags"), "Tags:", ListQuestion(element_kind=ListElementKind.TEXT, max_items=5)),
            ]
        )

    @classmethod
    def from_responses(cls, responses: Responses) -> "Preferences":
        return cls(
            username=responses.get_text(P("username")),
            age=responses.get_int(P("age")),
            height=responses.get_float(P("height")),
            features=[feature_from_responses(i, data) for i, data in read_any_of(responses, P("features"))],
            tags=list(responses.get_text_list(P("tags"))),
        )

    def to_responses(self) -> Responses:
        r = Responses()
        r.insert(P("username"), self.username)
        r.insert(P("age"), self.age)
        r.insert(P("height"), float(self.height))
        write_any_of(r, P("features"), [feature_to_responses(f) for f in self.features])
        r.insert(P("tags"), ResponseValue.text_list(self.tags))
        return r


# =============================================================================
# Account (validators)
# =============================================================================


@dataclass
class Account(Survey):
    username: str
    password: str
    bio: str
    newsletter: bool = False

    @classmethod
    def survey(cls) -> SurveyDefinition:
        return SurveyDefinition(
            questions=[
                Question(P("username"), "Username:", InputQuestion()),
                Question(P("password"), "Password:", MaskedQuestion()),
                Question(P("password_confirm"), "Repeat password:", MaskedQuestion()),
                Question(P("bio"), "Tell us about yourself:", MultilineQuestion()),
                Question(P("newsletter"), "Subscribe to the newsletter?", ConfirmQuestion(default=False)),
            ]
        )

    @classmethod
    def from_responses(cls, responses: Responses) -> "Account":
        return cls(
            username=responses.get_text(P("username")),
            password=responses.get_text(P("password")),
            bio=responses.get_text(P("bio")),
            newsletter=responses.get_bool(P("newsletter")),
        )

    def to_responses(self) -> Responses:
        r = Responses()
        r.insert(P("username"), self.username)
        r.insert(P("password"), self.password)
        r.insert(P("password_confirm"), self.password)
        r.insert(P("bio"), self.bio)
        r.insert(P("newsletter"), self.newsletter)
        return r

    @classmethod
    def validate_field(cls, path: ResponsePath, responses: Responses) -> Optional[str]:
        if path == P("username") and len(responses.get_text(path)) < 3:
            return "Username is too short"
        if path == P("password") and len(responses.get_text(path)) < 8:
            return "Password must be at least 8 characters"
        return super().validate_field(path, responses)

    @classmethod
    def validate_all(cls, responses: Responses) -> Dict[ResponsePath, str]:
        errors = {}
        password, confirm = P("password"), P("password_confirm")
        if password in responses and confirm in responses:
            if responses.get_text(password) != responses.get_text(confirm):
                errors[confirm] = "Passwords do not match"
        return errors
