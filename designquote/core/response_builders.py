from designquote.models.catalog import ProjectType, Feature, Page
from designquote.models.quote import Quote, QuoteFeature, QuotePage
from designquote.models.user import User
from designquote.schemas.catalog import ProjectTypeOut, FeatureOut, PageOut
from designquote.schemas.quote import QuoteOut, QuoteDetailOut, QuoteFeatureOut, QuotePageOut
from designquote.schemas.user import UserOut
from designquote.services.pricing import feature_unit_price

UNKNOWN_FEATURE = "Unknown Feature"
UNKNOWN_PAGE = "Unknown Page"


def build_project_type_response(project_type: ProjectType) -> ProjectTypeOut:
    return ProjectTypeOut(
        id=project_type.id,
        name=project_type.name,
        base_price=project_type.base_price,
        description=project_type.description,
        created_at=project_type.created_at,
        updated_at=project_type.updated_at,
    )


def build_feature_response(feature: Feature) -> FeatureOut:
    return FeatureOut(
        id=feature.id,
        name=feature.name,
        description=feature.description,
        category=feature.category,
        pricing_type=feature.pricing_type,
        flat_price=feature.flat_price,
        hourly_rate=feature.hourly_rate,
        estimated_hours=feature.estimated_hours,
        supports_quantity=feature.supports_quantity,
        for_all_project_types=feature.for_all_project_types,
        project_type_id=feature.project_type_id,
        project_type_ids=feature.project_type_ids,
        unit_price=feature_unit_price(feature),
    )


def build_page_response(page: Page) -> PageOut:
    return PageOut(
        id=page.id,
        name=page.name,
        description=page.description,
        price_per_page=page.price_per_page,
        default_quantity=page.default_quantity,
        supports_quantity=page.supports_quantity,
        is_active=page.is_active,
        project_type_id=page.project_type_id,
    )


def build_quote_feature_response(line: QuoteFeature) -> QuoteFeatureOut:
    return QuoteFeatureOut(
        id=line.id,
        quote_id=line.quote_id,
        feature_id=line.feature_id,
        feature_name=line.feature.name if line.feature else UNKNOWN_FEATURE,
        quantity=line.quantity,
        price=line.price,
    )


def build_quote_page_response(line: QuotePage) -> QuotePageOut:
    return QuotePageOut(
        id=line.id,
        quote_id=line.quote_id,
        page_id=line.page_id,
        page_name=line.page.name if line.page else UNKNOWN_PAGE,
        quantity=line.quantity,
        price=line.price,
    )


def _quote_fields(quote: Quote) -> dict:
    return dict(
        id=quote.id,
        project_type_id=quote.project_type_id,
        client_name=quote.client_name,
        business_name=quote.business_name,
        email=quote.email,
        phone=quote.phone,
        notes=quote.notes,
        internal_notes=quote.internal_notes,
        lead_status=quote.lead_status,
        total_price=quote.total_price,
        closed=quote.closed,
        close_date=quote.close_date,
        created_by=quote.created_by,
        updated_by=quote.updated_by,
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def build_quote_response(quote: Quote) -> QuoteOut:
    return QuoteOut(**_quote_fields(quote))


def build_quote_detail_response(quote: Quote) -> QuoteDetailOut:
    return QuoteDetailOut(
        **_quote_fields(quote),
        features=[build_quote_feature_response(line) for line in quote.feature_lines],
        pages=[build_quote_page_response(line) for line in quote.page_lines],
    )


def build_user_response(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        is_admin=user.is_admin,
    )


def build_quote_response_list(quotes: list) -> list:
    return [build_quote_response(quote) for quote in quotes]


def build_feature_response_list(features: list) -> list:
    return [build_feature_response(feature) for feature in features]


def build_page_response_list(pages: list) -> list:
    return [build_page_response(page) for page in pages]
