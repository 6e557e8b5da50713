import textwrap
from pathlib import Path

import pytest

from db.db_utils import build_engine
from pipeline.common.config import Settings


ATTENDANCE_CSV = """\
user_id,first_name,last_name,location,date,time,timezone,case,source
101,Ana,Reyes,Jakarta,2022-01-03,09:15:00,+07,IN,mobile
101,Ana,Reyes,Jakarta,2022-01-03,09:20:00,+07,IN,web
101,Ana,Reyes,Jakarta,2022-01-03,18:00:00,+07,OUT,mobile
101,Ana,Reyes,,2022-01-04,09:05:00,+07,IN,mobile
101,Ana,Reyes,,2022-01-04,17:00:00,+07,OUT,mobile
102,Budi,Santoso,Bandung,2022-01-03,08:55:00,+07,IN,web
102,Budi,Santoso,Bandung,2022-01-04,09:00:00,+07,IN,web
102,Budi,Santoso,Bandung,2022-01-04,09:00:00,+07,IN,web
102,Budi,Santoso,Bandung,2022-01-04,18:30:00,+07,OUT,web
102,Budi,Santoso,Bandung,2022-01-05,09:00:00,+07,IN,web
101,Ana,Reyes,Jakarta,2022-03-01,11:30:00,+07,IN,mobile
101,Ana,Reyes,Jakarta,2022-03-01,18:00:00,+07,OUT,mobile
"""

USERS_CSV = """\
user_id,first_name,last_name,gender,date_birth,date_hire,date_leave,employment,position,location,department,created_at
101,Ana,Reyes,female,1990-01-01,2020-01-01,,full_time,Engineer,Jakarta,Engineering,2020-01-01 08:00:00
102,Budi,Santoso,,1988-05-05,2019-03-01,,,Analyst,,Finance,2019-03-01 08:00:00
"""

PAYROLL_CSV = """\
user_id,first_name,last_name,date_start,date_end,ctc,net_pay,gross_pay,data_salary_basic_rate,data_salary_basic_type,currency,status,created_at
101,Ana,Reyes,2022-01-01,2022-01-31,1000,,900,1000,monthly,,paid,2022-02-01 00:00:00
102,Budi,Santoso,2022-01-01,2022-01-31,800,700,750,800,monthly,IDR,paid,2022-02-01 00:00:00
"""

SCHEDULES_CSV = """\
type,dates,time_start,time_end,timezone,time_planned,break_time,leave_type,user_id
work,"[""2022-01-03"",""2022-01-04""]",09:00,18:00,+07,480,60,,"{101,102}"
work,"[""2022-03-01""]",09:00,18:00,+07,480,,,{101}
leave,"[""2022-01-05""]",09:00,18:00,+07,0,0,annual_leave,{102}
"""

LEAVE_REQUESTS_CSV = """\
user_id,first_name,last_name,type,leave_type,dates,time_start,time_end,timezone,status,created_at
102,Budi,Santoso,leave,annual_leave,"[""2022-01-05""]",09:00,18:00,+07,approved,2021-12-20 10:00:00
"""

INVOICES_CSV = """\
country,customer_id,invoice_number,invoice_generated_date,invoice_due_date,invoice_amount,disputed,dispute_lost,invoice_settled_date,days_to_settle,days_late
France,3448-OWJOT,1001,2022-01-01,2022-01-31,100,true,true,2022-02-10,40,10
France,3448-OWJOT,1001,2022-01-01,2022-01-31,100,true,true,2022-02-10,40,10
France,9725-EZTEJ,1002,2022-01-05,2022-02-04,50,true,false,2022-02-20,46,16
Germany,1111-AAAAA,1003,2022-04-01,2022-05-01,200,false,false,2022-04-21,20,0
Germany,1111-AAAAA,1004,2022-04-10,2022-05-10,80,true,true,2022-05-30,50,20
USA,2222-BBBBB,1005,2022-07-01,2022-07-31,60,false,true,2022-07-15,14,0
France,7600-OISKG,1006,2022-07-02,2022-08-01,30,,,2022-07-20,18,0
"""

HOUSING_CSV = """\
unique_id,parcel_id,land_use,property_address,sale_date,sale_price,legal_reference,sold_as_vacant,owner_name,owner_address,acreage,tax_district,land_value,building_value,total_value,year_built,bedrooms,full_bath,half_bath
2,007 00 0 125.00,SINGLE FAMILY,"1808  FOX CHASE DR, GOODLETTSVILLE",2013-04-09,"$240,000",20130412-0036474,N,"FRAZIER, CYRENTHA","1808  FOX CHASE DR, GOODLETTSVILLE, TN",2.3,GENERAL SERVICES DISTRICT,50000,168200,235700,1986,3,3,0
1,007 00 0 125.00,SINGLE FAMILY,"1808  FOX CHASE DR, GOODLETTSVILLE",2013-04-09,"$240,000",20130412-0036474,N,"FRAZIER, CYRENTHA","1808  FOX CHASE DR, GOODLETTSVILLE, TN",2.3,GENERAL SERVICES DISTRICT,50000,168200,235700,1986,3,3,0
3,007 00 0 125.00,SINGLE FAMILY,,2014-06-10,120000,20140610-0000001,Y,,,,,,,,,,,
4,105 11 0 080.00,VACANT RES LAND,"1832  FOX CHASE DR, GOODLETTSVILLE",2013-04-10,"$1,200,000",20130410-0000001,Yes,"SMITH, JOHN","1832 FOX CHASE DR, GOODLETTSVILLE, TN",0.5,CITY OF GOODLETTSVILLE,10000,0,10000,,,,
"""

CASE_FILES = {
    "attendance": {
        "attendance.csv": ATTENDANCE_CSV,
        "users.csv": USERS_CSV,
        "payroll.csv": PAYROLL_CSV,
        "schedules.csv": SCHEDULES_CSV,
        "leave_requests.csv": LEAVE_REQUESTS_CSV,
    },
    "invoices": {"invoices.csv": INVOICES_CSV},
    "housing": {"housing.csv": HOUSING_CSV},
}


def write_csv(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def data_root(tmp_path):
    """``<tmp>/datasets/<case>/<file>.csv`` for every case study."""
    root = tmp_path / "datasets"
    for case, files in CASE_FILES.items():
        for name, content in files.items():
            write_csv(root / case / name, content)
    return root


@pytest.fixture
def settings(tmp_path, data_root):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'cases.db'}",
        data_dir=str(data_root),
        output_dir=str(tmp_path / "reports"),
        log_dir=None,
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings.database_url)
    yield engine
    engine.dispose()
