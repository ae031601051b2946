"""Write a BusinessRecord into an HTML template.

Templates mark their insertion points with ``data-iw-*`` attributes:

    data-iw-business-name     main business name (mandatory)
    data-iw-tagline           tagline text
    data-iw-phone             phone text + tel: link
    data-iw-whatsapp          wa.me link
    data-iw-email             email text + mailto: link
    data-iw-address           address text
    data-iw-hero-image        <img> src, or background-image on any other tag
    data-iw-logo              <img> src
    data-iw-services          container for service items
    data-iw-service-item      prototype service item, with nested
                              data-iw-service-title / -description / -icon
    data-iw-facebook          link href
    data-iw-instagram         link href

Every write replaces the previous value, so injecting the same record twice
yields the same document.
"""

import copy
import logging
from enum import StrEnum

from bs4 import BeautifulSoup, Tag

from app.exceptions.custom import TemplateMismatchError
from app.schemas.business import BusinessRecord, Service, SiteConfig

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "landwind-v1"

# Egypt is +20; national numbers keep their leading 0 after it
COUNTRY_CODE = "2"

CONFIG_STYLE_ATTR = "data-iw-config"


class Marker(StrEnum):
    business_name = "data-iw-business-name"
    tagline = "data-iw-tagline"
    phone = "data-iw-phone"
    whatsapp = "data-iw-whatsapp"
    email = "data-iw-email"
    address = "data-iw-address"
    hero_image = "data-iw-hero-image"
    logo = "data-iw-logo"
    services = "data-iw-services"
    service_item = "data-iw-service-item"
    service_title = "data-iw-service-title"
    service_description = "data-iw-service-description"
    service_icon = "data-iw-service-icon"
    facebook = "data-iw-facebook"
    instagram = "data-iw-instagram"

    @property
    def selector(self) -> str:
        return f"[{self.value}]"


REQUIRED_MARKERS = (Marker.business_name,)


class InjectionPolicy(StrEnum):
    lenient = "lenient"  # skip missing optional markers
    strict = "strict"  # any missing marker with data to write is an error


def _set_style_property(tag: Tag, prop: str, value: str) -> None:
    declarations: dict[str, str] = {}
    for chunk in tag.get("style", "").split(";"):
        name, sep, val = chunk.partition(":")
        if sep and name.strip():
            declarations[name.strip().lower()] = val.strip()
    declarations[prop] = value
    tag["style"] = "; ".join(f"{k}: {v}" for k, v in declarations.items())


class TemplateInjector:
    def __init__(
        self,
        html: str,
        template_id: str = DEFAULT_TEMPLATE_ID,
        policy: InjectionPolicy = InjectionPolicy.lenient,
    ):
        self._soup = BeautifulSoup(html, "html.parser")
        self.template_id = template_id
        self.policy = policy

        for marker in REQUIRED_MARKERS:
            if self._soup.find(attrs={marker.value: True}) is None:
                raise TemplateMismatchError(marker.selector, template_id)

        # Cloned from the pristine template so re-injection never copies
        # data written by an earlier pass
        prototype = self._soup.find(attrs={Marker.service_item.value: True})
        self._service_prototype = copy.copy(prototype) if prototype is not None else None

    def _locate(self, marker: Marker, root: Tag | None = None) -> Tag | None:
        tag = (root if root is not None else self._soup).find(attrs={marker.value: True})
        if tag is None and self.policy == InjectionPolicy.strict:
            raise TemplateMismatchError(marker.selector, self.template_id)
        return tag

    def _set_text(self, marker: Marker, value: str | None, root: Tag | None = None) -> Tag | None:
        if not value:
            return None
        tag = self._locate(marker, root)
        if tag is not None:
            tag.string = value
        return tag

    def _set_attr(self, marker: Marker, attr: str, value: str | None) -> None:
        if not value:
            return
        tag = self._locate(marker)
        if tag is not None:
            tag[attr] = value

    def inject_business_data(self, record: BusinessRecord) -> "TemplateInjector":
        self._set_text(Marker.business_name, record.business_name)
        self._set_text(Marker.tagline, record.tagline)

        phone_tag = self._set_text(Marker.phone, record.phone)
        if phone_tag is not None:
            phone_tag["href"] = f"tel:+{COUNTRY_CODE}{record.phone}"

        self._set_attr(
            Marker.whatsapp,
            "href",
            f"https://wa.me/{COUNTRY_CODE}{record.whatsapp or record.phone}",
        )

        email_tag = self._set_text(Marker.email, record.email)
        if email_tag is not None:
            email_tag["href"] = f"mailto:{record.email}"

        self._set_text(Marker.address, record.address)
        self._set_attr(Marker.logo, "src", record.logo)
        self._inject_hero_image(record.hero_image)
        self._set_attr(Marker.facebook, "href", record.facebook)
        self._set_attr(Marker.instagram, "href", record.instagram)
        self._inject_services(record.services)
        return self

    def _inject_hero_image(self, url: str | None) -> None:
        if not url:
            return
        tag = self._locate(Marker.hero_image)
        if tag is None:
            return
        if tag.name == "img":
            tag["src"] = url
        else:
            _set_style_property(tag, "background-image", f"url({url})")

    def _inject_services(self, services: list[Service]) -> None:
        container = self._soup.find(attrs={Marker.services.value: True})
        if container is None or self._service_prototype is None:
            if self.policy == InjectionPolicy.strict and services:
                missing = Marker.services if container is None else Marker.service_item
                raise TemplateMismatchError(missing.selector, self.template_id)
            logger.debug("Template %s has no services block, skipping", self.template_id)
            return

        container.clear()
        for service in services:
            item = copy.copy(self._service_prototype)
            self._set_text(Marker.service_title, service.title, root=item)
            self._set_text(Marker.service_description, service.description, root=item)
            self._set_text(Marker.service_icon, service.icon, root=item)
            container.append(item)

    def apply_config(self, config: SiteConfig) -> "TemplateInjector":
        html_tag = self._soup.find("html")
        if config.rtl and html_tag is not None:
            html_tag["dir"] = "rtl"
            html_tag["lang"] = "ar"

        style = self._soup.find("style", attrs={CONFIG_STYLE_ATTR: True})
        if style is None:
            style = self._soup.new_tag("style", attrs={CONFIG_STYLE_ATTR: ""})
            self._head(html_tag).append(style)
        style.string = (
            f":root {{ --color-primary: {config.primary_color}; "
            f"--color-secondary: {config.secondary_color}; }}"
        )

        body = self._soup.find("body")
        if config.font_family and body is not None:
            _set_style_property(body, "font-family", f"'{config.font_family}', sans-serif")
        return self

    def _head(self, html_tag: Tag | None) -> Tag:
        head = self._soup.find("head")
        if head is None:
            head = self._soup.new_tag("head")
            (html_tag if html_tag is not None else self._soup).insert(0, head)
        return head

    def get_html(self) -> str:
        return str(self._soup)


def inject_into_template(
    template_html: str,
    record: BusinessRecord,
    config: SiteConfig | None = None,
    template_id: str = DEFAULT_TEMPLATE_ID,
    policy: InjectionPolicy = InjectionPolicy.lenient,
) -> str:
    injector = TemplateInjector(template_html, template_id=template_id, policy=policy)
    injector.inject_business_data(record)
    if config is not None:
        injector.apply_config(config)
    return injector.get_html()
