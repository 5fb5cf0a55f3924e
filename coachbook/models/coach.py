from sqlmodel import Field, SQLModel


class Coach(SQLModel, table=True):
    __tablename__ = "coaches"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    slug: str = Field(unique=True, index=True)
    display_name: str | None = None
    public_note: str | None = None


class CoachPublic(SQLModel):
    slug: str
    display_name: str | None = None
    public_note: str | None = None
