from sqlalchemy import BigInteger, Boolean, DateTime, func, Integer, Numeric, String
from sqlalchemy.orm import mapped_column, Mapped
from datetime import datetime
from typing_extensions import Annotated

# Primary key types
BigIntegerPrimaryKeyType = Mapped[
    Annotated[int, mapped_column(BigInteger, primary_key=True)]
]
StringPrimaryKeyType = Mapped[Annotated[str, mapped_column(String, primary_key=True)]]

# Normal types
BigIntegerType = Mapped[Annotated[int, mapped_column(BigInteger)]]
BooleanType = Mapped[Annotated[bool, mapped_column(Boolean)]]
IntegerType = Mapped[Annotated[int, mapped_column(Integer)]]
# uint256 amounts do not fit in a BIGINT
NumericType = Mapped[Annotated[int, mapped_column(Numeric)]]
StringType = Mapped[Annotated[str, mapped_column(String)]]

# Nullable types
NullableBigIntegerType = Mapped[
    Annotated[int, mapped_column(BigInteger, nullable=True)]
]
NullableIntegerType = Mapped[
    Annotated[int, mapped_column(Integer, nullable=True)]
]
NullableNumericType = Mapped[
    Annotated[int, mapped_column(Numeric, nullable=True)]
]
NullableStringType = Mapped[
    Annotated[str, mapped_column(String, nullable=True)]
]

# Timestamp types
InsertedAtType = Mapped[
    Annotated[datetime, mapped_column(DateTime(timezone=True), default=func.now())]
]
UpdatedAtType = Mapped[
    Annotated[
        datetime,
        mapped_column(
            DateTime(timezone=True),
            default=func.now(),
            onupdate=func.now(),
        ),
    ]
]
