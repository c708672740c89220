from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.domain.models import DocDescription, Document, Product


class DocDescriptionSchema(BaseModel):
	"""Document description block"""
	model_config = ConfigDict(populate_by_name=True)

	participant_inn: str = Field(alias="participantInn")


class ProductSchema(BaseModel):
	"""A single marked product inside the document"""
	certificate_document: str
	certificate_document_date: Optional[date] = None
	certificate_document_number: str
	owner_inn: str
	producer_inn: str
	production_date: Optional[date] = None
	tnved_code: str
	uit_code: str
	uitu_code: str


class DocumentSchema(BaseModel):
	"""Top-level body of the document creation request"""
	model_config = ConfigDict(populate_by_name=True)

	doc_id: str
	description: DocDescriptionSchema
	doc_status: str
	doc_type: str
	import_request: bool = Field(alias="importRequest")
	owner_inn: str
	participant_inn: str
	producer_inn: str
	production_date: Optional[date] = None
	production_type: str
	products: list[ProductSchema]
	reg_date: Optional[date] = None
	reg_number: str

	@classmethod
	def from_domain(cls, document: Document) -> "DocumentSchema":
		return cls(
			doc_id=document.doc_id,
			description=DocDescriptionSchema(participant_inn=document.description.participant_inn),
			doc_status=document.doc_status,
			doc_type=document.doc_type,
			import_request=document.import_request,
			owner_inn=document.owner_inn,
			participant_inn=document.participant_inn,
			producer_inn=document.producer_inn,
			production_date=document.production_date,
			production_type=document.production_type,
			products=[ProductSchema.model_validate(p, from_attributes=True) for p in document.products],
			reg_date=document.reg_date,
			reg_number=document.reg_number,
		)

	def to_domain(self) -> Document:
		return Document(
			doc_id=self.doc_id,
			description=DocDescription(participant_inn=self.description.participant_inn),
			doc_status=self.doc_status,
			doc_type=self.doc_type,
			import_request=self.import_request,
			owner_inn=self.owner_inn,
			participant_inn=self.participant_inn,
			producer_inn=self.producer_inn,
			production_date=self.production_date,
			production_type=self.production_type,
			products=tuple(Product(**p.model_dump()) for p in self.products),
			reg_date=self.reg_date,
			reg_number=self.reg_number,
		)
